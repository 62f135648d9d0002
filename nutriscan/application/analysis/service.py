"""
Food image analysis service.

Single entry point for "photo in, nutrition out": asks the vision
source for an estimate, validates it and hands it to the resolution
orchestrator.
"""

from dataclasses import dataclass
from typing import Any

import structlog

from nutriscan.application.resolution.orchestrator import ResolutionOrchestrator
from nutriscan.domain.nutrition.models import EnrichedResult
from nutriscan.domain.recognition.models import VisualEstimate
from nutriscan.domain.recognition.ports import IVisionEstimateSource
from nutriscan.domain.recognition.validator import VisionEstimateValidator

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ImageAnalysis:
    """Validated estimate and the nutrition resolved for it."""

    estimate: VisualEstimate
    result: EnrichedResult

    def to_dict(self) -> dict[str, Any]:
        return {
            "dish_name": self.estimate.dish_name,
            "estimated_weight_g": self.estimate.estimated_weight_g,
            "confidence": self.estimate.confidence,
            **self.result.to_dict(),
        }


class FoodImageAnalysisService:
    """
    Service for analyzing a food photo end to end.

    Flow:
    1. Vision source describes the image (raw text)
    2. Validator extracts a VisualEstimate (raises if malformed)
    3. Orchestrator resolves nutrition

    Example:
        >>> service = FoodImageAnalysisService(
        ...     vision_source, VisionEstimateValidator(), orchestrator
        ... )
        >>> analysis = await service.analyze(image_bytes)
        >>> print(analysis.result.sources)
    """

    def __init__(
        self,
        vision_source: IVisionEstimateSource,
        validator: VisionEstimateValidator,
        orchestrator: ResolutionOrchestrator,
    ) -> None:
        self.vision_source = vision_source
        self.validator = validator
        self.orchestrator = orchestrator

    async def analyze(self, image_bytes: bytes) -> ImageAnalysis:
        """
        Analyze one food photo.

        Args:
            image_bytes: Encoded image

        Returns:
            ImageAnalysis with the estimate and the enriched result

        Raises:
            MalformedEstimateError: If the vision output cannot be validated
        """
        raw_text = await self.vision_source.estimate(image_bytes)
        estimate = self.validator.validate(raw_text).unwrap()

        logger.info(
            "Vision estimate accepted",
            dish_name=estimate.dish_name,
            confidence=estimate.confidence,
            image_size=len(image_bytes),
        )

        result = await self.orchestrator.resolve(estimate)
        return ImageAnalysis(estimate=estimate, result=result)

    async def resolve_text(self, raw_text: str) -> EnrichedResult:
        """Resolve nutrition for vision output obtained elsewhere.

        Raises:
            MalformedEstimateError: If the text cannot be validated
        """
        estimate = self.validator.validate(raw_text).unwrap()
        return await self.orchestrator.resolve(estimate)
