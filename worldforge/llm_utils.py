"""Helper utilities for LLM-related error handling and retries."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Callable, Sequence, TypeVar

from mirascope import llm
from pydantic import BaseModel, ValidationError
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt

from .config import Config
from .local_llm import LocalLLMError, call_ollama_chat
from .logging_utils import log_error, log_llm


ModelT = TypeVar("ModelT", bound=BaseModel)


class EmptyLLMResponseError(RuntimeError):
    """Raised when a plain-text LLM call returns no usable text."""


@dataclass(slots=True)
class ValidationFeedback:
    """Structured feedback for retrying failed LLM schema outputs."""

    llm_text: str
    issues: Sequence[str]


def _truncate_preview(value: Any, *, limit: int = 80) -> str:
    """Return a compact preview of the offending input value."""

    if value is None:
        return "null"
    text = repr(value)
    if len(text) > limit:
        return text[: limit - 3] + "..."
    return text


def inject_validation_feedback(error: ValidationError) -> ValidationFeedback:
    """Produce guidance for the model plus structured issues for logging.

    Each pydantic error becomes one line with its dotted field path
    (``races.0.name``), message, error type and a truncated preview of the
    offending value. The combined text is appended to the retry prompt.
    """

    issues: list[str] = []
    for err in error.errors(include_url=False):
        loc = ".".join(str(part) for part in err.get("loc", [])) or "root"
        details = f"{loc}: {err.get('msg', 'validation error')}"
        if err.get("type"):
            details += f" [type={err['type']}]"
        if "input" in err:
            preview = _truncate_preview(err.get("input"))
            if preview:
                details += f" | received={preview}"
        issues.append(details)

    if not issues:
        issues.append("root: response did not match the expected schema")

    instructions = [
        "Your previous JSON response failed to validate against the required schema.",
        "Produce a corrected response that strictly matches the schema.",
        "Do not include explanations or code fences; return only valid JSON.",
        "Issues detected:",
    ]
    instructions.extend(f"- {issue}" for issue in issues)

    return ValidationFeedback(llm_text="\n".join(instructions), issues=issues)


def _log_validation_failure(
    *,
    model_name: str,
    attempt: int,
    max_attempts: int,
    feedback: ValidationFeedback,
) -> None:
    """Print user-facing diagnostics for a failed validation attempt."""

    log_error(
        f"LLM schema validation failed for {model_name} (attempt {attempt}/{max_attempts})."
    )
    for issue in feedback.issues:
        print(f"    - {issue}")


def _join_sections(*sections: str) -> str:
    return "\n\n".join(section for section in sections if section)


async def call_llm_with_retries(
    *,
    system_prompt: str,
    user_prompt: str,
    llm_provider: str,
    llm_model: str,
    response_model: type[ModelT],
    max_attempts: int | None = None,
    timeout: float | None = None,
    feedback_builder: Callable[[ValidationError], ValidationFeedback] = inject_validation_feedback,
) -> ModelT:
    """Invoke a structured LLM call with validation-aware retries.

    Only schema validation failures are retried; the validation feedback is
    appended to the original user prompt so the model keeps its full context
    while seeing what to fix. Timeouts and provider errors propagate at once.
    After ``max_attempts`` the last ValidationError is re-raised.
    """

    max_attempts = max_attempts or Config.LLM_MAX_ATTEMPTS
    timeout = timeout or Config.LLM_TIMEOUT_SECONDS
    system_prompt = system_prompt.strip()
    base_user_prompt = user_prompt.strip()
    feedback_payload: ValidationFeedback | None = None

    use_local_llm = llm_provider.lower() == "ollama"

    remote_invoke: Callable[[str], Any] | None = None
    if not use_local_llm:
        @llm.call(provider=llm_provider, model=llm_model, response_model=response_model)
        async def _invoke(prompt: str) -> str:
            return prompt

        remote_invoke = _invoke

    attempt_number = 0
    async for attempt in AsyncRetrying(
        retry=retry_if_exception_type(ValidationError),
        stop=stop_after_attempt(max_attempts),
        reraise=True,
    ):
        with attempt:
            attempt_number += 1
            if attempt_number > 1:
                log_llm(
                    f"LLM retry {attempt_number}/{max_attempts} for {response_model.__name__};"
                    " attempting schema correction."
                )
            user_section = _join_sections(
                base_user_prompt,
                feedback_payload.llm_text if feedback_payload is not None else "",
            )
            try:
                if use_local_llm:
                    raw_response = await asyncio.wait_for(
                        call_ollama_chat(
                            system_prompt=system_prompt,
                            user_prompt=user_section,
                            llm_model=llm_model,
                            json_mode=True,
                            timeout=timeout,
                        ),
                        timeout=timeout,
                    )
                    return response_model.model_validate_json(raw_response)

                if remote_invoke is None:
                    raise RuntimeError("Remote LLM invoke is not initialized.")

                return await asyncio.wait_for(
                    remote_invoke(_join_sections(system_prompt, user_section)),
                    timeout=timeout,
                )
            except ValidationError as exc:  # pragma: no cover - retry path
                feedback_payload = feedback_builder(exc)
                _log_validation_failure(
                    model_name=response_model.__name__,
                    attempt=attempt_number,
                    max_attempts=max_attempts,
                    feedback=feedback_payload,
                )
                raise
            except asyncio.TimeoutError:  # pragma: no cover - timeout path
                log_error(
                    f"LLM call timed out after {int(timeout)}s for {response_model.__name__}."
                )
                raise
            except LocalLLMError as exc:
                raise RuntimeError(f"Local LLM provider error ({llm_provider}): {exc}") from exc

    raise RuntimeError("LLM retry mechanism exited unexpectedly")


async def call_llm_text(
    *,
    system_prompt: str,
    user_prompt: str,
    llm_provider: str,
    llm_model: str,
    max_attempts: int | None = None,
    timeout: float | None = None,
) -> str:
    """Invoke a plain-text LLM call and return the stripped response text.

    Empty responses are retried up to ``max_attempts`` times before
    EmptyLLMResponseError propagates.
    """

    max_attempts = max_attempts or Config.LLM_MAX_ATTEMPTS
    timeout = timeout or Config.LLM_TIMEOUT_SECONDS
    system_prompt = system_prompt.strip()
    user_prompt = user_prompt.strip()

    use_local_llm = llm_provider.lower() == "ollama"

    remote_invoke: Callable[[str], Any] | None = None
    if not use_local_llm:
        @llm.call(provider=llm_provider, model=llm_model)
        async def _invoke(prompt: str) -> str:
            return prompt

        remote_invoke = _invoke

    async for attempt in AsyncRetrying(
        retry=retry_if_exception_type(EmptyLLMResponseError),
        stop=stop_after_attempt(max_attempts),
        reraise=True,
    ):
        with attempt:
            try:
                if use_local_llm:
                    text = await asyncio.wait_for(
                        call_ollama_chat(
                            system_prompt=system_prompt,
                            user_prompt=user_prompt,
                            llm_model=llm_model,
                            timeout=timeout,
                        ),
                        timeout=timeout,
                    )
                else:
                    if remote_invoke is None:
                        raise RuntimeError("Remote LLM invoke is not initialized.")
                    response = await asyncio.wait_for(
                        remote_invoke(_join_sections(system_prompt, user_prompt)),
                        timeout=timeout,
                    )
                    text = response.content
            except asyncio.TimeoutError:  # pragma: no cover - timeout path
                log_error(f"LLM text call timed out after {int(timeout)}s.")
                raise
            except LocalLLMError as exc:
                raise RuntimeError(f"Local LLM provider error ({llm_provider}): {exc}") from exc

            text = (text or "").strip()
            if not text:
                log_error("LLM returned an empty text response; retrying.")
                raise EmptyLLMResponseError("LLM returned an empty response")
            return text

    raise RuntimeError("LLM retry mechanism exited unexpectedly")
