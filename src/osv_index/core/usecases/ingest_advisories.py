from __future__ import annotations

import logging
from threading import Event
from typing import Any, Iterable, Mapping, Optional, Union

from ..domain.enums import AliasPolicy, DocumentFormat
from ..domain.errors import AliasConflict, UnsupportedFormat, ValidationError
from ..domain.models import DocumentSource, IngestFailure, IngestReport
from ..ports.index_port import AdvisoryIndexPort
from ..ports.validator_port import AdvisoryValidatorPort
from ..services.format_detector import detect_format
from ...shared.utils import compute_digests

logger = logging.getLogger(__name__)

RawDocument = Union[bytes, str, Mapping[str, Any]]
SourcedDocument = tuple[Optional[str], RawDocument]


def _unpack(item: RawDocument | SourcedDocument) -> SourcedDocument:
    if isinstance(item, tuple) and len(item) == 2:
        return item
    return None, item  # type: ignore[return-value]


class IngestAdvisoriesUseCase:
    """Validate and insert a stream of raw OSV documents.

    A bad record never stops the run: validation errors, alias conflicts and
    non-OSV documents are logged and collected in the report. Cancellation is
    honoured between records only, so every record is either fully inserted or
    not inserted at all.
    """

    def __init__(
        self,
        index: AdvisoryIndexPort,
        validator: AdvisoryValidatorPort,
        policy: AliasPolicy | None = None,
    ) -> None:
        self._index = index
        self._validator = validator
        self._policy = policy

    def execute(
        self,
        documents: Iterable[RawDocument | SourcedDocument],
        *,
        labels: Mapping[str, str] | None = None,
        cancel: Event | None = None,
    ) -> IngestReport:
        report = IngestReport()
        doc_labels = {**(labels or {}), "type": "osv"}

        for item in documents:
            if cancel is not None and cancel.is_set():
                logger.info(f"Ingest cancelled after {report.processed} documents")
                report.cancelled = True
                break
            source, raw = _unpack(item)
            try:
                replaced = self._ingest_one(source, raw, doc_labels)
            except (ValidationError, AliasConflict, UnsupportedFormat) as exc:
                logger.warning(f"Failed to ingest {source or '<unnamed document>'}: {exc}")
                report.failures.append(IngestFailure(source=source, error=exc))
                continue
            if replaced:
                report.updated += 1
            else:
                report.inserted += 1

        logger.info(
            f"Ingested {report.processed} documents: {report.inserted} inserted, "
            f"{report.updated} updated, {len(report.failures)} failed"
        )
        return report

    def _ingest_one(self, source: Optional[str], raw: RawDocument, labels: dict[str, str]) -> bool:
        digests = None
        if isinstance(raw, (bytes, bytearray, str)):
            fmt = detect_format(raw)
            if fmt is not DocumentFormat.OSV:
                raise UnsupportedFormat(f"{source or 'document'} is {fmt.value}, only OSV records are supported")
            digests = compute_digests(raw.encode("utf-8") if isinstance(raw, str) else bytes(raw))

        advisory = self._validator.validate(raw)
        advisory = advisory.with_updates(source=DocumentSource(name=source, digests=digests, labels=dict(labels)))
        previous = self._index.insert(advisory, policy=self._policy)
        logger.debug(f"{'Updated' if previous is not None else 'Inserted'} {advisory.id} from {source or '<unnamed document>'}")
        return previous is not None
