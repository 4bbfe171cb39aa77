"""Batch conversion orchestrator.

Drives every source of a batch through

    acquire -> decode -> trim -> mono -> resample -> transcribe -> encode

strictly one item at a time. A failing item is recorded and the batch
moves on; only model initialisation and configuration problems fail the
batch as a whole. Cancellation is polled between items, so an item that
has started always finishes or fails cleanly.
"""

import logging
from dataclasses import replace
from typing import Iterable, Optional, Set

from .acquisition import BatchSource, materialize, source_name
from .events import EventBus, EventKind
from .job import BatchJob, BatchState
from .settings import ConversionSettings
from ..core import (
    ConversionError,
    ConversionResult,
    InvalidConfigurationError,
    ItemError,
)
from ..input import AudioLoader
from ..output import MIDIEncoder, output_name_for, unique_name
from ..output.package import Delivery, build_delivery
from ..transcription import Transcriber, get_default_transcriber

logger = logging.getLogger(__name__)


class BatchOrchestrator:
    """Runs conversion batches against one transcriber."""

    def __init__(
        self,
        transcriber: Optional[Transcriber] = None,
        loader: Optional[AudioLoader] = None,
        encoder: Optional[MIDIEncoder] = None,
        events: Optional[EventBus] = None,
    ):
        """
        Initialize BatchOrchestrator.

        Args:
            transcriber: Model adapter; None = the shared piano transcriber
            loader: Audio loader; None = one built from each run's settings
            encoder: MIDI encoder
            events: Bus that receives progress events
        """
        self.transcriber = transcriber
        self.loader = loader
        self.encoder = encoder or MIDIEncoder()
        self.events = events or EventBus()

    def start(
        self,
        sources: Iterable[BatchSource],
        settings: Optional[ConversionSettings] = None,
    ) -> BatchJob:
        """Create a job for sources and run it to a terminal state."""
        return self.run(BatchJob(sources=list(sources)), settings)

    def run(
        self,
        job: BatchJob,
        settings: Optional[ConversionSettings] = None,
    ) -> BatchJob:
        """
        Run a job. Prior results and errors are cleared.

        A cancel requested before the run starts is honoured before the
        first item. The request is cleared once the job reaches a terminal
        state, so the job can be run again.

        Returns:
            The same job, in COMPLETED, CANCELLED or FAILED state
        """
        try:
            return self._drive(job, settings or ConversionSettings())
        finally:
            if job.state.is_terminal:
                job.clear_cancel()

    def _drive(self, job: BatchJob, settings: ConversionSettings) -> BatchJob:
        job.reset()
        job.state = BatchState.RUNNING
        total = job.total

        if total == 0:
            return self._fail(job, InvalidConfigurationError("No audio sources provided"))

        try:
            settings.validate()
            transcriber = self._prepare_transcriber()
        except ConversionError as e:
            if not e.batch_fatal:
                raise
            return self._fail(job, e)

        loader = self.loader or AudioLoader(
            target_sr=transcriber.sample_rate,
            normalize_peaks=settings.normalize_audio,
        )

        self.events.emit(
            EventKind.BATCH_STARTED,
            f"Processing {total} audio file(s)...",
            index=0,
            total=total,
        )

        taken_names: Set[str] = set()
        for index in range(total):
            if job.cancel_requested:
                job.state = BatchState.CANCELLED
                self.events.emit(
                    EventKind.BATCH_FINISHED,
                    "Conversion cancelled",
                    index=index,
                    total=total,
                    level=logging.WARNING,
                )
                return job

            job.cursor = index
            source = job.sources[index]
            name = source_name(source)
            self.events.emit(
                EventKind.ITEM_STARTED,
                f"Processing {index + 1}/{total}: {name}",
                index=index,
                total=total,
                source_name=name,
            )

            try:
                result = self.process_source(
                    index, source, settings, total, transcriber, loader
                )
            except ConversionError as e:
                if e.batch_fatal:
                    return self._fail(job, e, name)
                self._record_error(job, index, name, e.kind, e.message)
            except Exception as e:
                logger.exception("Unexpected failure while processing %s", name)
                self._record_error(job, index, name, "UnexpectedError", str(e))
            else:
                output_name = unique_name(result.output_name, taken_names)
                if output_name != result.output_name:
                    logger.info("Renamed duplicate output %s to %s", result.output_name, output_name)
                    result = replace(result, output_name=output_name)
                job.results.append(result)
                self.events.emit(
                    EventKind.ITEM_COMPLETED,
                    f"Completed: {result.output_name} ({result.note_count} notes)",
                    index=index,
                    total=total,
                    source_name=name,
                )

        job.cursor = total
        job.state = BatchState.COMPLETED
        self.events.emit(
            EventKind.BATCH_FINISHED,
            job.summary(),
            index=total - 1,
            total=total,
            level=logging.INFO if job.results else logging.WARNING,
        )
        return job

    def process_source(
        self,
        index: int,
        source: BatchSource,
        settings: ConversionSettings,
        total: int,
        transcriber: Transcriber,
        loader: AudioLoader,
    ) -> ConversionResult:
        """Run one source through every stage."""
        name = source_name(source)

        def stage(message: str) -> None:
            self.events.emit(
                EventKind.STAGE, message, index=index, total=total, source_name=name
            )

        audio = materialize(source)

        stage("Loading audio...")
        trim_range = settings.trim_range
        if trim_range is not None:
            end_label = f"{settings.end_time}s" if settings.end_time else "end"
            stage(f"Trimming audio ({settings.start_time}s to {end_label})")
        buffer = loader.normalize(
            audio.raw_bytes,
            target_sr=transcriber.sample_rate,
            trim_range=trim_range,
        )
        stage(f"Audio ready: {buffer.duration:.1f}s at {buffer.sample_rate}Hz")

        stage("Transcribing with piano transcription model...")
        notes = transcriber.transcribe(loader.get_samples(buffer))

        stage("Generating MIDI file...")
        if settings.enable_duration_filter and settings.max_note_duration is not None:
            notes = self.encoder.filter_by_duration(notes, settings.max_note_duration)
        midi_bytes = self.encoder.encode(notes)

        return ConversionResult(
            output_name=output_name_for(index, audio.base_name, total, settings.custom_title),
            midi_bytes=midi_bytes,
            note_count=self.encoder.get_note_count(notes),
            duration=self.encoder.get_duration(notes),
            source_name=name,
            source_bytes=audio.raw_bytes if settings.keep_original_audio else None,
        )

    def deliver(self, job: BatchJob, settings: Optional[ConversionSettings] = None) -> Delivery:
        """Package a finished job's results."""
        settings = settings or ConversionSettings()
        return build_delivery(
            job.results,
            archive_output=settings.archive_output,
            archive_name=settings.archive_name,
            include_original=settings.include_original_in_archive,
        )

    def _prepare_transcriber(self) -> Transcriber:
        if self.transcriber is None:
            self.transcriber = get_default_transcriber()
        self.transcriber.ensure_ready()
        return self.transcriber

    def _record_error(
        self, job: BatchJob, index: int, name: str, kind: str, message: str
    ) -> None:
        job.errors.append(ItemError(source_name=name, error_kind=kind, message=message))
        self.events.emit(
            EventKind.ITEM_FAILED,
            f"Failed to process {name}: {message}",
            index=index,
            total=job.total,
            source_name=name,
            level=logging.ERROR,
        )

    def _fail(
        self, job: BatchJob, error: ConversionError, name: Optional[str] = None
    ) -> BatchJob:
        job.state = BatchState.FAILED
        job.failure = ItemError(
            source_name=name or error.source_name or "batch",
            error_kind=error.kind,
            message=error.message,
        )
        self.events.emit(
            EventKind.BATCH_FINISHED,
            f"Batch failed: {error.message}",
            total=job.total,
            source_name=name,
            level=logging.ERROR,
        )
        return job
