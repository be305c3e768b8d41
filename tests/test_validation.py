from __future__ import annotations

from buildtask.build_log import RunLog
from buildtask.validation import find_precondition_failure, validate_inputs


def test_valid_configuration_has_no_failure(task_env):
    assert find_precondition_failure(task_env.config()) is None
    assert validate_inputs(task_env.config(), RunLog()) is True


def test_missing_protoc_is_reported_first(task_env):
    config = task_env.config(
        protoc_exe=str(task_env.root / "bin" / "missing-protoc"),
        output=str(task_env.root / "missing-output"),
        protos=[],
    )
    failure = find_precondition_failure(config)

    assert failure is not None
    assert failure.check == "protoc_exe"
    assert failure.path == str(task_env.root / "bin" / "missing-protoc")


def test_missing_temp_root_is_reported_before_output(task_env):
    config = task_env.config(
        temp_dir=str(task_env.root / "no-tmp"),
        output=str(task_env.root / "missing-output"),
    )
    failure = find_precondition_failure(config)

    assert failure.check == "temp_dir"
    assert "Temporary directory does not exist" in failure.message


def test_missing_output_is_reported_and_not_created(task_env):
    missing = task_env.root / "missing-output"
    log = RunLog()

    assert validate_inputs(task_env.config(output=str(missing)), log) is False
    assert log.errors == [f"Output directory does not exist '{missing}'"]
    assert not missing.exists()


def test_empty_inputs_are_rejected(task_env):
    failure = find_precondition_failure(task_env.config(protos=[]))

    assert failure.check == "protos"
    assert failure.message == "No input files were specified"


def test_first_missing_input_is_named(task_env):
    missing = task_env.root / "protos" / "missing.proto"
    other = task_env.root / "protos" / "other-missing.proto"
    config = task_env.config(protos=[str(task_env.protos[0]), str(missing), str(other)])
    log = RunLog()

    assert validate_inputs(config, log) is False
    assert log.errors == [f"Could not find input file '{missing}'"]


def test_output_path_that_is_a_file_is_rejected(task_env):
    not_a_dir = task_env.root / "generated.txt"
    not_a_dir.write_text("", encoding="utf-8")

    failure = find_precondition_failure(task_env.config(output=str(not_a_dir)))

    assert failure.check == "output"
