import io
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path
from unittest.mock import MagicMock, patch

from icsorg.errors import ExitCode, ExpansionError, SinkError
from icsorg.model import ExpandedWindow, Occurrence
from icsorg.pipeline import (
    ConvertProcessor,
    ConvertRequest,
    ConvertResult,
    OrgFileProducer,
    ResultEnvelope,
    run_convert,
)
from icsorg.settings import Settings
from tests.fixtures import (
    EXPECTED_HEADER,
    EXPECTED_OFFSITE,
    EXPECTED_PLANNING,
    OFFSITE_OVERRIDE,
    PLANNING_EVENT,
    STANDUP_SERIES,
    dt,
    make_ics,
    parse_event,
)


class FakeExpander:
    """Returns one master (uid X) and one override of another series (uid Y)."""

    def __init__(self):
        self.calls = []

    def expand(self, ics_text, window_start, window_end):
        self.calls.append((ics_text, window_start, window_end))
        occ = Occurrence(
            start=dt(2021, 8, 6), end=dt(2021, 8, 7),
            item=parse_event(OFFSITE_OVERRIDE), recurrence_id=dt(2021, 8, 6),
        )
        return ExpandedWindow(events=(parse_event(PLANNING_EVENT),), occurrences=(occ,))


class FailingExpander:
    def expand(self, ics_text, window_start, window_end):
        raise ExpansionError("expand: unable to parse calendar data: bad input")


def _settings(org_file, **kw):
    base = dict(
        author="Fred Flintstone", email="fred@bedrock.com", org_file=org_file,
        ics_file="calendar.ics", timezone="UTC",
        window_start=dt(2021, 8, 1), window_end=dt(2021, 8, 31),
    )
    base.update(kw)
    return Settings(**base)


class ConvertProcessorTests(unittest.TestCase):
    def test_master_then_occurrence(self):
        expander = FakeExpander()
        proc = ConvertProcessor(expander=expander, fetch=lambda src: "ICS DATA")
        env = proc.process(ConvertRequest(settings=_settings("out.org")))
        self.assertTrue(env.ok())
        self.assertEqual([e.uid for e in env.payload.events], ["X", "Y"])
        self.assertEqual(expander.calls, [("ICS DATA", dt(2021, 8, 1), dt(2021, 8, 31))])

    def test_prefetched_text_skips_fetch(self):
        def _no_fetch(src):
            raise AssertionError("fetch should not be called")

        proc = ConvertProcessor(expander=FakeExpander(), fetch=_no_fetch)
        env = proc.process(ConvertRequest(settings=_settings("out.org"), ics_text="ICS"))
        self.assertTrue(env.ok())

    def test_expansion_failure_is_fatal(self):
        proc = ConvertProcessor(expander=FailingExpander(), fetch=lambda src: "garbage")
        env = proc.process(ConvertRequest(settings=_settings("out.org")))
        self.assertFalse(env.ok())
        self.assertEqual(env.exit_code(), ExitCode.ERROR)
        self.assertIn("unable to parse", env.diagnostics["message"])

    def test_missing_org_file(self):
        proc = ConvertProcessor(expander=FakeExpander(), fetch=lambda src: "ICS")
        env = proc.process(ConvertRequest(settings=_settings(None)))
        self.assertEqual(env.exit_code(), ExitCode.CONFIG_ERROR)


class OrgFileProducerTests(unittest.TestCase):
    def test_writes_document(self):
        proc = ConvertProcessor(expander=FakeExpander(), fetch=lambda src: "ICS")
        with tempfile.TemporaryDirectory() as tmp:
            out = Path(tmp) / "calendar.org"
            env = proc.process(ConvertRequest(settings=_settings(str(out))))
            buf = io.StringIO()
            with redirect_stdout(buf):
                OrgFileProducer().produce(env)
            text = out.read_text(encoding="utf-8")
        self.assertEqual(text, EXPECTED_HEADER + EXPECTED_PLANNING + EXPECTED_OFFSITE)
        self.assertEqual(text.count("\n* "), 2)
        self.assertTrue(text.split("\n\n", 1)[1].startswith("* Planning"))
        self.assertIn("with 2 entries", buf.getvalue())

    def test_stdout_sink(self):
        proc = ConvertProcessor(expander=FakeExpander(), fetch=lambda src: "ICS")
        env = proc.process(ConvertRequest(settings=_settings("-")))
        buf = io.StringIO()
        with redirect_stdout(buf):
            OrgFileProducer().produce(env)
        self.assertEqual(buf.getvalue(), EXPECTED_HEADER + EXPECTED_PLANNING + EXPECTED_OFFSITE)

    def test_sink_failure_raises_with_stage(self):
        with tempfile.TemporaryDirectory() as tmp:
            result = ConvertResult(header=_settings("x").header(), events=(), org_file=str(Path(tmp) / "missing" / "cal.org"))
            with self.assertRaises(SinkError) as ctx:
                OrgFileProducer().produce(ResultEnvelope(status="success", payload=result))
        self.assertTrue(str(ctx.exception).startswith("write_org_file:"))

    def test_stdout_sink_failure_raises_sink_error(self):
        result = ConvertResult(header=_settings("-").header(), events=(), org_file="-")
        broken = MagicMock()
        broken.writelines.side_effect = BrokenPipeError("Broken pipe")
        with patch("sys.stdout", new=broken):
            with self.assertRaises(SinkError) as ctx:
                OrgFileProducer().produce(ResultEnvelope(status="success", payload=result))
        self.assertEqual(str(ctx.exception), "write_org_file: Broken pipe")
        self.assertEqual(ctx.exception.stage, "write")

    def test_error_envelope_prints_message(self):
        buf = io.StringIO()
        with redirect_stderr(buf):
            OrgFileProducer().produce(ResultEnvelope(status="error", diagnostics={"message": "boom", "hint": "try again"}))
        self.assertIn("Error: boom", buf.getvalue())
        self.assertIn("Hint: try again", buf.getvalue())


class RunConvertTests(unittest.TestCase):
    def test_real_expander_end_to_end_is_idempotent(self):
        ics = make_ics(PLANNING_EVENT, STANDUP_SERIES)
        outputs = []
        with tempfile.TemporaryDirectory() as tmp:
            for name in ("a.org", "b.org"):
                out = Path(tmp) / name
                with redirect_stdout(io.StringIO()):
                    rc = run_convert(ConvertRequest(settings=_settings(str(out)), ics_text=ics))
                self.assertEqual(rc, 0)
                outputs.append(out.read_bytes())
        self.assertEqual(outputs[0], outputs[1])
        text = outputs[0].decode("utf-8")
        self.assertEqual(text.count("\n* "), 4)
        # The stand-alone event comes before any series occurrence
        self.assertLess(text.index("* Planning"), text.index("* Standup"))
        self.assertIn("* Standup (moved)\n", text)
        self.assertIn("<2021-08-09 Mon 10:00-10:30>", text)

    def test_failure_exit_code_and_no_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            out = Path(tmp) / "calendar.org"
            with redirect_stderr(io.StringIO()):
                rc = run_convert(
                    ConvertRequest(settings=_settings(str(out)), ics_text="not a calendar"),
                )
            self.assertEqual(rc, ExitCode.ERROR)
            self.assertFalse(out.exists())


if __name__ == '__main__':  # pragma: no cover
    unittest.main()
