"""
OCI Generative AI Chat Inference Module.

Thin wrapper over the OCI Generative AI chat endpoint used by the
assistant for both intent detection and reply generation. Each client is
bound to one model and one sampling temperature.

Key features:
- Conversion of role-tagged prompts into OCI messages
- Single-input inference with a system prompt
- Failures surfaced as LLMInferenceError for the retry layer
Dependencies:
- OCI SDK for Python
"""
import oci
from oci.generative_ai_inference.models import GenericChatRequest, TextContent, Message
from typing import List
import logging

from config_loader import GenAIConfig

logger = logging.getLogger(__name__)


class LLMInferenceError(RuntimeError):
    """Raised when LLM inference fails."""


class LLMInference:
    """
    OCI Generative AI interface for the PrimeNest assistant.

    Args:
        config (GenAIConfig): Endpoint, compartment and OCI profile.
        model_id (str): Model serving this client's requests.
        temperature (float): Sampling temperature.
        max_tokens (int): Upper bound on generated tokens.
    """

    def __init__(self, config: GenAIConfig, model_id: str, temperature: float, max_tokens: int = 2000):
        try:
            self.model_id = model_id
            self.temperature = temperature
            self.max_tokens = max_tokens
            self.config = oci.config.from_file(config.oci_config_file, config.profile)
            self.generative_ai_inference_client = (
                oci.generative_ai_inference.GenerativeAiInferenceClient(
                    config=self.config,
                    service_endpoint=config.endpoint,
                    retry_strategy=oci.retry.NoneRetryStrategy(),
                    timeout=(5, 60)
                )
            )
            self.compartment_id = config.compartment_id
            self.serving_mode = oci.generative_ai_inference.models.OnDemandServingMode(model_id=model_id)
            logger.info("OCI LLM client initialized for model %s", model_id)
        except Exception as e:
            logger.error(f"Failed to initialize OCI LLM client: {str(e)}")
            raise

    @staticmethod
    def _convert_message_to_oci_format(role: str, message: str) -> Message:
        """
        Convert a role-tagged message to OCI Message format.
        SYSTEM messages are sent with the USER role.
        """
        role_mapping = {
            "USER": "USER",
            "ASSISTANT": "ASSISTANT",
            "SYSTEM": "USER"
        }
        oci_role = role_mapping.get(role.upper(), "USER")
        content = TextContent()
        content.text = message
        content.type = 'TEXT'
        oci_message = Message()
        oci_message.role = oci_role
        oci_message.content = [content]
        return oci_message

    def _chat(self, oci_messages: List[Message]) -> str:
        chat_request = GenericChatRequest(
            api_format=GenericChatRequest.API_FORMAT_GENERIC,
            messages=oci_messages,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
            frequency_penalty=0,
            presence_penalty=0,
            top_p=0.75
        )
        # Shared across request threads: nothing per-call is stored on self
        chat_detail = oci.generative_ai_inference.models.ChatDetails(
            compartment_id=self.compartment_id,
            serving_mode=self.serving_mode,
            chat_request=chat_request
        )
        chat_response = self.generative_ai_inference_client.chat(chat_detail)
        return chat_response.data.chat_response.choices[0].message.content[0].text

    def inference_single_input(self, user_input: str, system_prompt: str) -> str:
        """
        Direct inference for a single user input with a system prompt.

        Raises:
            LLMInferenceError: If the call fails.
        """
        try:
            oci_messages = [
                self._convert_message_to_oci_format("SYSTEM", system_prompt),
                self._convert_message_to_oci_format("USER", user_input),
            ]
            response_text = self._chat(oci_messages)
            logger.info("Single input inference on %s succeeded", self.model_id)
            return response_text.strip()
        except Exception as e:
            logger.error(f"Single input inference failed: {str(e)}")
            raise LLMInferenceError("Failed to generate LLM response") from e


def create_llm_client(config: GenAIConfig, purpose: str = "response") -> LLMInference:
    """
    Factory returning the intent or the response client.
    """
    if purpose == "intent":
        return LLMInference(config, config.intent_model_id, config.intent_temperature, max_tokens=300)
    return LLMInference(config, config.response_model_id, config.response_temperature)
