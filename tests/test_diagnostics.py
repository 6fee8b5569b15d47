from table_autopilot.core.diagnostics import Diagnostics


def test_emit_formats_line_and_records_event(log_lines):
    diagnostics = Diagnostics(log_lines)
    event = diagnostics.emit("direct_failed", "safe_corrpdf", "handler failed", cause=ValueError("bad shape"))

    assert event.cause == "ValueError: bad shape"
    assert event.level == "WARN"
    assert log_lines.lines == ["[WARN] safe_corrpdf: handler failed (ValueError: bad shape)"]
    assert diagnostics.warnings() == ["handler failed"]
    assert event.to_dict()["kind"] == "direct_failed"


def test_progress_only_when_verbose(log_lines):
    quiet = Diagnostics(log_lines)
    quiet.progress("autopilot", 'Executing "corrpdf"')
    assert quiet.events == []

    loud = Diagnostics(log_lines, verbose=True)
    loud.progress("autopilot", 'Executing "corrpdf"')
    assert log_lines.lines == ['[INFO] autopilot: Executing "corrpdf"']
    assert loud.warnings() == []


def test_verbose_without_logger_writes_to_stderr(capsys):
    Diagnostics(verbose=True).emit("call_failed", "generic_numeric", "boom")
    assert "[ERROR] generic_numeric: boom" in capsys.readouterr().err
