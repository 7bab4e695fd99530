from typing import Optional
import random
import re
from openai import AsyncOpenAI
from loguru import logger
import sibyl.configuration.constants as global_constants
from sibyl.configuration.configuration import OracleConfig
from sibyl.models.models import Prediction, GenerationResult
from sibyl.prompts.prediction import prediction_user_prompt, fallback_predictions

FALLBACK_PREDICTIONS = tuple(Prediction(**fallback) for fallback in fallback_predictions)

PREDICTION_PATTERN = re.compile(r'^[ \t]*PREDICTION:[ \t]*(.+)$', re.IGNORECASE | re.MULTILINE)
CONFIDENCE_PATTERN = re.compile(r'^[ \t]*CONFIDENCE:[ \t]*(\d+)', re.IGNORECASE | re.MULTILINE)
HOURS_PATTERN = re.compile(r'^[ \t]*HOURS:[ \t]*(\d+)', re.IGNORECASE | re.MULTILINE)

def parse_prediction_response(text: Optional[str]) -> Optional[Prediction]:
    """Parse a PREDICTION/CONFIDENCE/HOURS reply.

    Returns None unless all three fields are present and well formed;
    a partially parsed reply is never returned.
    """
    if not text:
        return None

    prediction_match = PREDICTION_PATTERN.search(text)
    confidence_match = CONFIDENCE_PATTERN.search(text)
    hours_match = HOURS_PATTERN.search(text)
    if not prediction_match or not confidence_match or not hours_match:
        return None

    statement = prediction_match.group(1).strip()
    if not statement:
        return None

    return Prediction(
        statement=statement,
        confidence=int(confidence_match.group(1)),
        hours=int(hours_match.group(1)),
    )

class DeepSeekRequestTool:
    """Generates predictions through DeepSeek's OpenAI-compatible chat completions API"""

    def __init__(
            self,
            oracle_config: OracleConfig,
            client: Optional[AsyncOpenAI] = None,
            rng: Optional[random.Random] = None
        ):
        self.oracle_config = oracle_config
        self.api_key = oracle_config.deepseek_api_key
        self.model = oracle_config.deepseek_model
        self.rng = rng or random.Random()

        if client is not None:
            self.client = client
        elif self.api_key:
            # Single attempt per run, a failure goes straight to the fallback pool
            self.client = AsyncOpenAI(
                base_url=oracle_config.deepseek_base_url,
                api_key=self.api_key,
                max_retries=0
            )
        else:
            self.client = None

    def _prepare_api_args(self) -> dict:
        return {
            "model": self.model,
            "messages": [{"role": "user", "content": prediction_user_prompt}],
            "max_tokens": global_constants.PREDICTION_MAX_TOKENS,
            "temperature": global_constants.PREDICTION_TEMPERATURE,
        }

    def get_fallback_prediction(self) -> Prediction:
        return self.rng.choice(FALLBACK_PREDICTIONS)

    def _fallback(self, reason: str) -> GenerationResult:
        return GenerationResult.fallback(self.get_fallback_prediction(), reason=reason)

    async def run_chat_completion(self) -> str:
        """Run a single chat completion and return the reply text"""
        api_args = self._prepare_api_args()
        logger.debug(f"DeepSeekRequestTool.run_chat_completion: Requesting completion from {self.model}")
        completion = await self.client.chat.completions.create(**api_args)
        return completion.choices[0].message.content

    async def generate(self) -> GenerationResult:
        """Generate a prediction. Never raises; any failure yields a fallback prediction."""
        if self.client is None:
            logger.warning("DEEPSEEK_API_KEY not set, using fallback prediction")
            return self._fallback("missing api key")

        try:
            text = await self.run_chat_completion()
        except Exception as e:
            logger.error(f"DeepSeekRequestTool.generate: AI generation failed: {e}")
            return self._fallback(f"request failed: {e}")

        prediction = parse_prediction_response(text)
        if prediction is None:
            logger.warning("DeepSeekRequestTool.generate: Failed to parse AI response, using fallback")
            logger.debug(f"DeepSeekRequestTool.generate: Unparseable response: {text!r}")
            return self._fallback("unparseable response")

        return GenerationResult.ok(prediction)
