"""
Vision estimate validation.

Parses the vision model's raw text into a VisualEstimate. The model is
asked for a bare JSON object but often wraps it in prose or markdown
fences, so the first decodable JSON object in the text is used.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Optional

import structlog
from pydantic import ValidationError

from nutriscan.domain.recognition.models import VisualEstimate
from nutriscan.domain.shared.errors import MalformedEstimateError

logger = structlog.get_logger(__name__)

REQUIRED_FIELDS = (
    "dishName",
    "calories",
    "protein",
    "carbs",
    "fat",
    "fiber",
    "estimatedWeight",
    "confidence",
)

# Model replies are a few kilobytes; anything far larger is not an estimate.
MAX_RAW_TEXT_LENGTH = 20_000

_decoder = json.JSONDecoder()


def extract_json_object(raw_text: str) -> Optional[dict[str, Any]]:
    """
    Find the first well-formed JSON object embedded in free text.

    Tries each ``{`` in order and decodes from there; the first position
    that yields a JSON object wins. Nesting too deep for the decoder counts
    as undecodable at that position.

    Example:
        >>> extract_json_object('Sure! ```json {"dishName": "Fufu"} ```')
        {'dishName': 'Fufu'}
        >>> extract_json_object("no json here") is None
        True
    """
    start = raw_text.find("{")
    while start != -1:
        try:
            obj, _ = _decoder.raw_decode(raw_text, start)
        except (json.JSONDecodeError, RecursionError):
            obj = None
        if isinstance(obj, dict):
            return obj
        start = raw_text.find("{", start + 1)
    return None


@dataclass(frozen=True)
class EstimateParseResult:
    """Outcome of validating raw vision output: an estimate or a reason."""

    estimate: Optional[VisualEstimate] = None
    error: Optional[str] = None
    raw_text: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.estimate is not None

    def unwrap(self) -> VisualEstimate:
        """Return the estimate or raise MalformedEstimateError."""
        if self.estimate is None:
            raise MalformedEstimateError(self.error or "Invalid vision output", self.raw_text)
        return self.estimate


class VisionEstimateValidator:
    """Turns raw vision model text into a validated VisualEstimate."""

    def validate(self, raw_text: str) -> EstimateParseResult:
        """
        Validate raw model output.

        Args:
            raw_text: Text returned by the vision model

        Returns:
            EstimateParseResult with either ``estimate`` or ``error`` set
        """
        if not isinstance(raw_text, str):
            return self._failure("Vision output is not text", None)

        if len(raw_text) > MAX_RAW_TEXT_LENGTH:
            return self._failure(
                f"Vision output too long: {len(raw_text)} characters", raw_text[:200]
            )

        data = extract_json_object(raw_text)
        if data is None:
            return self._failure("No JSON object found in vision output", raw_text)

        missing = [name for name in REQUIRED_FIELDS if data.get(name) is None]
        if missing:
            return self._failure(f"Missing required fields: {', '.join(missing)}", raw_text)

        try:
            estimate = VisualEstimate.model_validate(self._prepare(data))
        except (ValidationError, TypeError) as e:
            return self._failure(f"Invalid estimate fields: {e}", raw_text)

        logger.debug(
            "Vision estimate parsed",
            dish_name=estimate.dish_name,
            confidence=estimate.confidence,
            has_barcode=estimate.barcode is not None,
        )
        return EstimateParseResult(estimate=estimate, raw_text=raw_text)

    def _prepare(self, data: dict[str, Any]) -> dict[str, Any]:
        """Light repairs the model commonly needs before validation."""
        prepared = dict(data)

        barcode = prepared.get("barcode")
        if isinstance(barcode, int) and not isinstance(barcode, bool):
            prepared["barcode"] = str(barcode)

        ingredients = prepared.get("ingredients")
        main_ingredients = prepared.get("mainIngredients")
        if isinstance(ingredients, list) and isinstance(main_ingredients, list):
            # The model lists main ingredients it forgot to repeat in the full list.
            listed = {i.strip() for i in ingredients if isinstance(i, str)}
            extra = []
            for m in main_ingredients:
                if isinstance(m, str) and m.strip() and m.strip() not in listed:
                    listed.add(m.strip())
                    extra.append(m.strip())
            prepared["ingredients"] = ingredients + extra

        return prepared

    def _failure(self, reason: str, raw_text: Optional[str]) -> EstimateParseResult:
        logger.warning("Malformed vision estimate", reason=reason)
        return EstimateParseResult(error=reason, raw_text=raw_text)


def parse_estimate(raw_text: str) -> VisualEstimate:
    """
    Parse raw vision output or raise.

    Raises:
        MalformedEstimateError: If no valid estimate can be extracted
    """
    return VisionEstimateValidator().validate(raw_text).unwrap()
