import logging
from typing import Any, Dict, Optional

import replicate
from replicate.exceptions import ReplicateException

from models.errors import GenerationFailed

logger = logging.getLogger("ReplicateClient")

DEFAULT_MODEL = "black-forest-labs/flux-1.1-pro"

BASE_PROMPT = (
    "Create a high-detail pixel art dragon with no background. Render a perfect, symmetric side view "
    "of the entire dragon, showcasing its elongated body, detailed scales, and vibrant colors in crisp "
    "pixel style. The image should capture the dragon in full profile with clean lines and a balanced "
    "composition, emphasizing its majestic form without any additional elements."
)


def compose_prompt(custom_prompt: Optional[str], base_prompt: str = BASE_PROMPT) -> str:
    custom = custom_prompt if isinstance(custom_prompt, str) else ""
    return f"{base_prompt} {custom}".strip()


class ReplicateGenerator:
    """Text-to-image capability backed by Replicate.

    The output is returned untouched; its shape varies between SDK versions
    and models and is resolved by asset_processor.normalize_output.
    """

    def __init__(self, api_token: Optional[str], default_model: str = DEFAULT_MODEL, client: Any = None):
        self.default_model = default_model
        self.client = client or replicate.Client(api_token=api_token)

    def build_input(self, prompt: str) -> Dict[str, Any]:
        return {"prompt": prompt, "prompt_upsampling": True}

    def run(self, model_id: Optional[str], model_input: Dict[str, Any]) -> Any:
        model_id = model_id or self.default_model
        logger.info(f"Running Replicate model {model_id}")
        try:
            output = self.client.run(model_id, input=model_input)
        except ReplicateException as e:
            logger.error(f"Replicate model {model_id} failed: {e}")
            raise GenerationFailed(f"Replicate model {model_id} failed: {e}", model=model_id) from e
        if not output:
            raise GenerationFailed("No output from Replicate", model=model_id)
        return output

    def generate(self, custom_prompt: Optional[str], model_id: Optional[str] = None) -> Any:
        return self.run(model_id, self.build_input(compose_prompt(custom_prompt)))
