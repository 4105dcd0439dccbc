"""Consumer/processor/producer wiring for a conversion run.

``ConvertProcessor`` does everything up to the in-memory event list
(acquire, expand, normalize, merge). ``OrgFileProducer`` streams the
rendered document to the org file. Processing failures come back in a
``ResultEnvelope``; sink failures are raised as ``SinkError``.
"""
from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Generic, Optional, Tuple, TypeVar

from .document import DocumentAssembler
from .errors import ConfigError, ExitCode, ExpansionError, IcsOrgError, SinkError
from .expander import CalendarExpander, IcalExpander
from .merge import merge_window
from .model import HeaderFields, NormalizedEvent
from .normalizer import EventNormalizer
from .settings import Settings
from .sources import get_ics_data

LOG = logging.getLogger(__name__)

RequestT = TypeVar("RequestT")
ResultT = TypeVar("ResultT")
T = TypeVar("T")
R = TypeVar("R")

STDOUT = "-"


@dataclass
class ResultEnvelope(Generic[ResultT]):
    status: str
    payload: Optional[ResultT] = None
    diagnostics: Optional[Dict[str, Any]] = None

    def ok(self) -> bool:
        return self.status.lower() == "success"

    def exit_code(self) -> int:
        if self.ok():
            return int(ExitCode.SUCCESS)
        return int((self.diagnostics or {}).get("code", ExitCode.ERROR))


class RequestConsumer(Generic[RequestT]):
    """Hands a prepared request to the processor."""

    def __init__(self, request: RequestT) -> None:
        self._request = request

    def consume(self) -> RequestT:  # pragma: no cover - trivial
        return self._request


class SafeProcessor(Generic[T, R]):
    """Processor base that turns exceptions into error envelopes.

    Subclasses implement ``_process_safe``. IcsOrgError keeps its stage,
    exit code and hint; anything else is reported as a generic error.
    """

    def process(self, payload: T) -> ResultEnvelope[R]:
        try:
            return ResultEnvelope(status="success", payload=self._process_safe(payload))
        except IcsOrgError as e:
            return ResultEnvelope(status="error", diagnostics=e.diagnostics())
        except Exception as e:
            LOG.debug("conversion failed", exc_info=True)
            return ResultEnvelope(status="error", diagnostics={"message": str(e), "code": int(ExitCode.ERROR)})

    def _process_safe(self, payload: T) -> R:
        raise NotImplementedError("Subclass must implement _process_safe")


class BaseProducer:
    """Producer base: prints failures, delegates success to the subclass."""

    def produce(self, result: ResultEnvelope) -> None:
        if not result.ok():
            diag = result.diagnostics or {}
            if diag.get("message"):
                print(f"Error: {diag['message']}", file=sys.stderr)
            if diag.get("hint"):
                print(f"Hint: {diag['hint']}", file=sys.stderr)
            return
        if result.payload is not None:
            self._produce_success(result.payload, result.diagnostics)

    def _produce_success(self, payload: Any, diagnostics: Optional[Dict[str, Any]]) -> None:
        raise NotImplementedError("Subclass must implement _produce_success")


@dataclass
class ConvertRequest:
    settings: Settings
    ics_text: Optional[str] = None  # pre-fetched data; skips acquisition when set


ConvertRequestConsumer = RequestConsumer[ConvertRequest]


@dataclass
class ConvertResult:
    header: HeaderFields
    events: Tuple[NormalizedEvent, ...]
    org_file: str


class ConvertProcessor(SafeProcessor[ConvertRequest, ConvertResult]):
    """Acquire, expand, normalize and merge events for one run."""

    def __init__(
        self,
        expander: Optional[CalendarExpander] = None,
        fetch: Callable[[Optional[str]], str] = get_ics_data,
    ) -> None:
        self._expander = expander or IcalExpander()
        self._fetch = fetch

    def _process_safe(self, payload: ConvertRequest) -> ConvertResult:
        settings = payload.settings
        if not settings.org_file:
            raise ConfigError("No org file configured", hint="Pass -o PATH (or -o - for stdout) or set ORG_FILE")
        if settings.window_start is None or settings.window_end is None:
            settings = settings.with_window()
        normalizer = EventNormalizer(settings.identity(), settings.tzinfo())

        data = payload.ics_text if payload.ics_text is not None else self._fetch(settings.ics_file)
        window = self._expander.expand(data, settings.window_start, settings.window_end)
        try:
            masters = [normalizer.normalize_event(c) for c in window.events]
            occurrences = [normalizer.normalize_occurrence(o) for o in window.occurrences]
        except ValueError as exc:
            raise ExpansionError(f"normalize: {exc}") from exc
        events = merge_window(masters, occurrences, chronological=settings.sort)
        LOG.debug("normalized %d masters and %d occurrences", len(masters), len(occurrences))
        return ConvertResult(header=settings.header(), events=events, org_file=settings.org_file)


class OrgFileProducer(BaseProducer):
    """Stream the Org document into the configured file (or stdout)."""

    def _produce_success(self, payload: ConvertResult, diagnostics: Optional[Dict[str, Any]]) -> None:
        assembler = DocumentAssembler(payload.header)
        chunks = assembler.iter_document(payload.events)
        if payload.org_file == STDOUT:
            try:
                sys.stdout.writelines(chunks)
            except OSError as exc:
                raise SinkError(f"write_org_file: {exc}") from exc
            return
        target = Path(payload.org_file).expanduser()
        try:
            with target.open("w", encoding="utf-8") as fh:
                fh.writelines(chunks)
        except OSError as exc:
            raise SinkError(f"write_org_file: {exc}") from exc
        LOG.debug("wrote %s", target)
        print(f"Generated new org file in {payload.org_file} with {len(payload.events)} entries")


def run_convert(
    request: ConvertRequest,
    processor: Optional[ConvertProcessor] = None,
    producer: Optional[BaseProducer] = None,
) -> int:
    """Run one conversion and return the CLI exit code."""
    envelope = (processor or ConvertProcessor()).process(ConvertRequestConsumer(request).consume())
    (producer or OrgFileProducer()).produce(envelope)
    return envelope.exit_code()
