"""Tests for the OCR orchestration service."""

import pytest

from app.core.enums import ErrorKind, ErrorSeverity
from app.core.exceptions import BatchError, RecognitionError
from app.infrastructure.ocr_engines.base_engine import ProviderError, RecognitionOutcome
from app.models.domain import AnnotationNode, BatchItem
from app.services.ocr_service import (
    AUTH_FAILURE_MESSAGE,
    GENERIC_FAILURE_MESSAGE,
    INVALID_IMAGE_MESSAGE,
    OCRService,
    classify_provider_error,
)

TREE = AnnotationNode.from_raw({
    "pages": [{"confidence": 0.9, "blocks": [{"confidence": 0.8}, {"confidence": 1.0}]}],
})


class TestProcessResult:
    """Tests for reducing a provider outcome."""

    def test_text_is_trimmed(self) -> None:
        """Should strip surrounding whitespace and report text."""
        result = OCRService.process_result(
            RecognitionOutcome(full_text="  Hello World  ", annotation_tree=TREE)
        )

        assert result.text == "Hello World"
        assert result.has_text is True
        assert result.confidence == 0.9

    def test_empty_text_short_circuits(self) -> None:
        """Should report zero confidence for empty text even with a scored tree."""
        result = OCRService.process_result(
            RecognitionOutcome(full_text="", annotation_tree=TREE)
        )

        assert result.text == ""
        assert result.confidence == 0.0
        assert result.has_text is False

    def test_whitespace_only_text_is_empty(self) -> None:
        result = OCRService.process_result(
            RecognitionOutcome(full_text=" \n\t ", annotation_tree=TREE)
        )

        assert result.has_text is False
        assert result.confidence == 0.0

    def test_text_without_confidences(self) -> None:
        """Should keep has_text when the tree carries no confidence."""
        result = OCRService.process_result(
            RecognitionOutcome(full_text="abc", annotation_tree=None)
        )

        assert result.text == "abc"
        assert result.has_text is True
        assert result.confidence == 0.0

    def test_confidence_rounded_to_two_decimals(self) -> None:
        tree = AnnotationNode.from_raw({"pages": [{"confidence": 0.8765}]})

        result = OCRService.process_result(
            RecognitionOutcome(full_text="x", annotation_tree=tree)
        )

        assert result.confidence == 0.88


class TestClassifyProviderError:
    """Tests for mapping provider failures onto error kinds."""

    def test_invalid_argument_code(self) -> None:
        error = classify_provider_error(ProviderError(3, "Bad image data."))

        assert error.kind is ErrorKind.INVALID_IMAGE
        assert error.message == INVALID_IMAGE_MESSAGE
        assert error.severity is ErrorSeverity.CLIENT

    def test_invalid_image_message(self) -> None:
        error = classify_provider_error(ProviderError(13, "Invalid image content"))

        assert error.kind is ErrorKind.INVALID_IMAGE

    @pytest.mark.parametrize("code", [7, 16])
    def test_auth_codes(self, code: int) -> None:
        error = classify_provider_error(ProviderError(code, "denied"))

        assert error.kind is ErrorKind.PROVIDER_AUTH_FAILURE
        assert error.message == AUTH_FAILURE_MESSAGE
        assert error.severity is ErrorSeverity.SERVER

    def test_permission_message(self) -> None:
        error = classify_provider_error(ProviderError(2, "caller lacks permission"))

        assert error.kind is ErrorKind.PROVIDER_AUTH_FAILURE

    def test_generic_keeps_provider_message(self) -> None:
        error = classify_provider_error(ProviderError(14, "Service unavailable"))

        assert error.kind is ErrorKind.PROVIDER_FAILURE
        assert error.message == "Service unavailable"
        assert error.severity is ErrorSeverity.SERVER
        assert error.details == {"provider_code": 14}

    def test_generic_without_message(self) -> None:
        error = classify_provider_error(ProviderError(13, ""))

        assert error.message == GENERIC_FAILURE_MESSAGE

    def test_non_provider_exception(self) -> None:
        error = classify_provider_error(RuntimeError("boom"))

        assert error.kind is ErrorKind.PROVIDER_FAILURE
        assert error.message == "boom"

    def test_is_pure(self) -> None:
        source = ProviderError(3, "Bad image data.")

        first = classify_provider_error(source)
        second = classify_provider_error(source)

        assert (first.kind, first.message) == (second.kind, second.message)


class TestRecognizeAndProcess:
    """Tests for the single image flow."""

    async def test_success(self, fake_engine) -> None:
        fake_engine.script(b"img", RecognitionOutcome(full_text=" Hi ", annotation_tree=TREE))
        service = OCRService(fake_engine)

        result = await service.recognize_and_process(b"img")

        assert result.text == "Hi"
        assert result.confidence == 0.9
        assert fake_engine.calls == [b"img"]

    async def test_failure_is_classified_and_not_retried(self, fake_engine) -> None:
        """Should raise a RecognitionError after exactly one provider call."""
        fake_engine.script(b"img", ProviderError(7, "PERMISSION_DENIED"))
        service = OCRService(fake_engine)

        with pytest.raises(RecognitionError) as exc_info:
            await service.recognize_and_process(b"img")

        assert exc_info.value.kind is ErrorKind.PROVIDER_AUTH_FAILURE
        assert len(fake_engine.calls) == 1

    async def test_handle_single_reports_time(self, fake_engine) -> None:
        fake_engine.script(b"img", RecognitionOutcome(full_text="Hi", annotation_tree=TREE))
        service = OCRService(fake_engine)

        outcome = await service.handle_single(b"img")

        assert outcome.result.text == "Hi"
        assert outcome.processing_time_ms >= 0


class TestProcessBatch:
    """Tests for concurrent batch orchestration."""

    @staticmethod
    def _items() -> list:
        return [
            BatchItem(filename="a.png", content=b"A"),
            BatchItem(filename="b.png", content=b"B"),
            BatchItem(filename="c.png", content=b"C"),
        ]

    async def test_order_kept_with_failure_in_the_middle(self, fake_engine) -> None:
        """Should return A-success, B-failure, C-success whatever finishes first."""
        fake_engine.script(b"A", RecognitionOutcome("alpha", TREE), delay=0.05)
        fake_engine.script(b"B", ProviderError(3, "Bad image data."), delay=0.02)
        fake_engine.script(b"C", RecognitionOutcome("gamma", None), delay=0.0)
        service = OCRService(fake_engine)

        results = await service.process_batch(self._items())

        assert [r.filename for r in results] == ["a.png", "b.png", "c.png"]
        assert [r.success for r in results] == [True, False, True]
        assert results[0].text == "alpha"
        assert results[0].confidence == 0.9
        assert results[1].error == INVALID_IMAGE_MESSAGE
        assert results[1].text is None
        assert results[2].text == "gamma"
        assert results[2].confidence == 0.0

    async def test_failure_does_not_change_siblings(self, fake_engine) -> None:
        """Should give the same sibling results with and without a failing item."""
        fake_engine.script(b"A", RecognitionOutcome("alpha", TREE))
        fake_engine.script(b"B", RecognitionOutcome("beta", TREE))
        fake_engine.script(b"C", RecognitionOutcome("gamma", TREE))
        service = OCRService(fake_engine)
        baseline = await service.process_batch(self._items())

        fake_engine.script(b"B", RuntimeError("connection reset"))
        with_failure = await service.process_batch(self._items())

        assert with_failure[0] == baseline[0]
        assert with_failure[2] == baseline[2]
        assert with_failure[1].success is False
        assert with_failure[1].error == "connection reset"

    async def test_nan_confidence_in_typed_tree_keeps_batch(self, fake_engine) -> None:
        """Should finish the batch when one item's tree holds a NaN confidence."""
        nan_tree = AnnotationNode(
            confidence=float("nan"),
            pages=[AnnotationNode(confidence=0.7)],
        )
        fake_engine.script(b"B", RecognitionOutcome("beta", nan_tree))
        service = OCRService(fake_engine)

        results = await service.process_batch(self._items())

        assert [r.success for r in results] == [True, True, True]
        assert results[1].text == "beta"
        assert results[1].confidence == 0.7

    async def test_unexpected_processing_error_fails_only_its_item(
        self, fake_engine, monkeypatch
    ) -> None:
        """Should record a failure raised after recognition instead of aborting."""
        original = OCRService.process_result

        def process_result(outcome):
            if outcome.full_text == "beta":
                raise ValueError("result rejected")
            return original(outcome)

        fake_engine.script(b"A", RecognitionOutcome("alpha", TREE))
        fake_engine.script(b"B", RecognitionOutcome("beta", TREE))
        fake_engine.script(b"C", RecognitionOutcome("gamma", TREE))
        monkeypatch.setattr(OCRService, "process_result", staticmethod(process_result))
        service = OCRService(fake_engine)

        results = await service.process_batch(self._items())

        assert [r.success for r in results] == [True, False, True]
        assert results[1].error == "result rejected"
        assert results[0].text == "alpha"
        assert results[2].text == "gamma"

    async def test_all_items_fail_without_raising(self, fake_engine) -> None:
        fake_engine.default = ProviderError(14, "unavailable")
        service = OCRService(fake_engine)

        results = await service.process_batch(self._items())

        assert [r.success for r in results] == [False, False, False]
        assert {r.error for r in results} == {"unavailable"}

    async def test_items_run_concurrently(self, fake_engine) -> None:
        """Should have every provider call in flight at once."""
        for payload in (b"A", b"B", b"C"):
            fake_engine.script(payload, RecognitionOutcome("t", None), delay=0.02)
        service = OCRService(fake_engine)

        await service.process_batch(self._items())

        assert fake_engine.max_in_flight == 3

    async def test_single_item_batch(self, fake_engine) -> None:
        fake_engine.script(b"A", RecognitionOutcome("alpha", TREE))
        service = OCRService(fake_engine)

        results = await service.process_batch([BatchItem(filename="a.png", content=b"A")])

        assert len(results) == 1
        assert results[0].success is True

    async def test_duplicate_filenames_keep_positions(self, fake_engine) -> None:
        fake_engine.script(b"A", RecognitionOutcome("first", None), delay=0.03)
        fake_engine.script(b"B", RecognitionOutcome("second", None))
        service = OCRService(fake_engine)

        results = await service.process_batch([
            BatchItem(filename="same.png", content=b"A"),
            BatchItem(filename="same.png", content=b"B"),
        ])

        assert [r.text for r in results] == ["first", "second"]

    async def test_empty_batch_raises(self, fake_engine) -> None:
        service = OCRService(fake_engine)

        with pytest.raises(BatchError):
            await service.process_batch([])

    async def test_oversized_batch_raises(self, fake_engine) -> None:
        service = OCRService(fake_engine, max_batch_size=2)

        with pytest.raises(BatchError) as exc_info:
            await service.process_batch(self._items())

        assert "Maximum 2 files" in exc_info.value.message
        assert fake_engine.calls == []

    async def test_handle_batch_totals(self, fake_engine) -> None:
        fake_engine.script(b"B", ProviderError(3, "Bad image data."))
        service = OCRService(fake_engine)

        batch = await service.handle_batch(self._items())

        assert batch.total_images == 3
        assert batch.processing_time_ms >= 0
        assert [r.success for r in batch.results] == [True, False, True]
