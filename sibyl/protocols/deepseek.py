from typing import Protocol
from sibyl.models.models import GenerationResult, Prediction

class DeepSeekRequestTool(Protocol):
    """Protocol for DeepSeekRequestTool"""

    async def generate(self) -> GenerationResult:
        """Generate a prediction, substituting a fallback on any failure"""
        ...

    def get_fallback_prediction(self) -> Prediction:
        ...
