"""Tests for encode process supervision

The encoder is replaced by small Python child processes so that exit codes,
stderr output and pipe behaviour are real.
"""
import subprocess
import sys
import textwrap
from pathlib import Path

import pytest

from vbatch.exceptions import CommandExecutionError, EncodingError
from vbatch.models import EncodeJob, EncoderParams, JobState
from vbatch.supervisor import ProcessSupervisor


@pytest.fixture
def job(tmp_path):
    return EncodeJob(
        source=tmp_path / "movie.mkv",
        output=tmp_path / "movie_hevc.mp4",
        params=EncoderParams(codec="hevc", preset="medium", crf=28, threads=0)
    )


def child(script):
    return [sys.executable, "-c", textwrap.dedent(script)]


@pytest.fixture
def run_child(mocker, settings, display_factory):
    """Run a job whose encoder is the given Python script."""
    def run(job, script, line_sink=None):
        mocker.patch("vbatch.supervisor.build_encode_command", return_value=child(script))
        supervisor = ProcessSupervisor(settings, line_sink=line_sink, display_factory=display_factory)
        return supervisor, supervisor.run(job)
    return run


def test_successful_encode(run_child, job, displays):
    lines = []
    supervisor, outcome = run_child(job, """
        import sys
        sys.stderr.write("Input #0, matroska\\n")
        for second in (1, 2, 3):
            sys.stderr.write(f"frame={second} time=00:00:0{second}.00 duration=4.0\\n")
        sys.stderr.write("done\\n")
    """, line_sink=lines.append)

    assert outcome.success
    assert outcome.error is None
    assert outcome.returncode == 0
    assert outcome.lines_read == 5
    assert lines[0] == "Input #0, matroska"
    assert lines[-1] == "done"
    assert displays[0].updates == [25.0, 50.0, 75.0]
    assert displays[0].exited
    assert supervisor.state is JobState.COMPLETED


def test_nonzero_exit_is_a_failure(run_child, job):
    _, outcome = run_child(job, """
        import sys
        sys.stderr.write("Unknown encoder\\n")
        sys.exit(3)
    """)

    assert not outcome.success
    assert isinstance(outcome.error, EncodingError)
    assert outcome.error.exit_code == 3
    assert outcome.returncode == 3
    assert "code 3" in str(outcome.error)


def test_missing_binary_is_a_failure(mocker, settings, display_factory, job, tmp_path):
    mocker.patch(
        "vbatch.supervisor.build_encode_command",
        return_value=[str(tmp_path / "no-such-ffmpeg"), "-i", "x"]
    )
    supervisor = ProcessSupervisor(settings, display_factory=display_factory)

    outcome = supervisor.run(job)

    assert not outcome.success
    assert isinstance(outcome.error, CommandExecutionError)
    assert isinstance(outcome.error.__cause__, OSError)
    assert outcome.returncode is None
    assert supervisor.state is JobState.COMPLETED


def test_large_output_does_not_stall_child(run_child, job):
    """A child writing far more than a pipe buffer must still finish."""
    lines = []
    _, outcome = run_child(job, """
        import sys
        for i in range(20000):
            sys.stderr.write(f"line {i:05d} " + "x" * 80 + "\\n")
    """, line_sink=lines.append)

    assert outcome.success
    assert len(lines) == 20000
    assert lines[12345].startswith("line 12345 ")


def test_carriage_return_status_lines_are_split(run_child, job, displays):
    """ffmpeg rewrites its status line with a bare carriage return."""
    lines = []
    _, outcome = run_child(job, """
        import sys
        for second in (1, 2):
            sys.stderr.write(f"time=00:00:0{second}.00 duration=2.0\\r")
        sys.stderr.write("\\n")
    """, line_sink=lines.append)

    assert outcome.success
    assert lines[:2] == ["time=00:00:01.00 duration=2.0", "time=00:00:02.00 duration=2.0"]
    assert displays[0].updates == [50.0, 100.0]


def test_echo_prints_lines_through_display(run_child, job, settings, displays):
    settings.batch.echo_encoder_output = True
    run_child(job, """
        import sys
        sys.stderr.write("hello\\n")
    """)

    assert displays[0].lines == ["hello"]


def test_interrupt_terminates_child(mocker, settings, display_factory, job):
    mock_process = mocker.MagicMock()
    mock_process.stderr.readline.return_value = ""
    mock_process.wait.side_effect = [KeyboardInterrupt(), 0]
    mocker.patch("vbatch.supervisor.subprocess.Popen", return_value=mock_process)
    supervisor = ProcessSupervisor(settings, display_factory=display_factory)

    with pytest.raises(KeyboardInterrupt):
        supervisor.run(job)

    mock_process.terminate.assert_called_once()
    mock_process.kill.assert_not_called()


def test_interrupt_kills_child_that_ignores_terminate(mocker, settings, display_factory, job):
    mock_process = mocker.MagicMock()
    mock_process.stderr.readline.return_value = ""
    mock_process.wait.side_effect = [
        KeyboardInterrupt(),
        subprocess.TimeoutExpired("ffmpeg", 5),
        -9
    ]
    mocker.patch("vbatch.supervisor.subprocess.Popen", return_value=mock_process)
    supervisor = ProcessSupervisor(settings, display_factory=display_factory)

    with pytest.raises(KeyboardInterrupt):
        supervisor.run(job)

    mock_process.terminate.assert_called_once()
    mock_process.kill.assert_called_once()


def test_popen_receives_built_command(mocker, settings, display_factory, job):
    mock_process = mocker.MagicMock()
    mock_process.stderr.readline.return_value = ""
    mock_process.wait.return_value = 0
    mock_popen = mocker.patch("vbatch.supervisor.subprocess.Popen", return_value=mock_process)
    settings.encoder.binary = "/opt/ffmpeg/bin/ffmpeg"

    outcome = ProcessSupervisor(settings, display_factory=display_factory).run(job)

    cmd = mock_popen.call_args[0][0]
    assert cmd[0] == "/opt/ffmpeg/bin/ffmpeg"
    assert str(job.source) in cmd
    assert mock_popen.call_args[1]["stderr"] == subprocess.PIPE
    assert outcome.success
    assert outcome.output == Path(job.output)


def test_failing_line_sink_does_not_fail_job(run_child, job):
    """A consumer error must not close the pipe under a running child."""
    seen = []

    def sink(line):
        seen.append(line)
        if len(seen) == 3:
            raise RuntimeError("sink broke")

    supervisor, outcome = run_child(job, """
        import sys
        for i in range(5000):
            sys.stderr.write(f"line {i}\\n")
    """, line_sink=sink)

    assert outcome.success
    assert outcome.returncode == 0
    assert outcome.lines_read == 5000
    assert len(seen) == 5000
    assert isinstance(supervisor.drainer.error, RuntimeError)


def test_outcome_without_waiting_for_drain(run_child, job, settings):
    settings.process.wait_for_drain = False
    lines = []
    supervisor, outcome = run_child(job, """
        import sys
        for i in range(200):
            sys.stderr.write(f"line {i}\\n")
    """, line_sink=lines.append)

    assert outcome.success
    assert supervisor.drainer.join(timeout=5)
    assert lines == [f"line {i}" for i in range(200)]


def test_warns_when_drain_outlives_timeout(mocker, settings, display_factory, job, caplog):
    mock_process = mocker.MagicMock()
    mock_process.wait.return_value = 0
    mocker.patch("vbatch.supervisor.subprocess.Popen", return_value=mock_process)
    mock_drainer = mocker.MagicMock(lines_read=7, error=None)
    mock_drainer.join.return_value = False
    mocker.patch("vbatch.supervisor.StreamDrainer", return_value=mock_drainer)
    settings.process.drain_timeout = 0.01

    with caplog.at_level("WARNING", logger="vbatch.supervisor"):
        outcome = ProcessSupervisor(settings, display_factory=display_factory).run(job)

    mock_drainer.join.assert_called_once_with(0.01)
    assert "still draining" in caplog.text
    assert outcome.success
    assert outcome.lines_read == 7
