"""
LLM Workload Estimator via LiteLLM

Implements the WorkloadEstimator hook by asking a language model to assess
a student's pending workload. The model is selected with LiteLLM's
"provider/model-name" format, so any supported provider can be used.

Every failure (provider error, invalid JSON, schema mismatch) is raised as
EstimationHookError; estimate_workload() then falls back to the
deterministic heuristic.

See: https://docs.litellm.ai/

Usage:
    from study_planner.services.scheduling.llm_estimator import LLMWorkloadEstimator

    estimator = LLMWorkloadEstimator()
    estimate, used_fallback = await estimate_workload(tasks, workloads, estimator)
"""

import json
import logging
import re
from typing import Any, Optional

import litellm
from litellm import acompletion
from pydantic import ValidationError as PydanticValidationError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from study_planner.config.scheduling import scheduling_settings
from study_planner.config.settings import settings
from study_planner.exceptions import EstimationHookError
from study_planner.models.scheduling import ClassWorkload, Task, WorkloadEstimate

logger = logging.getLogger(__name__)

# Drop unsupported params instead of erroring
litellm.drop_params = True

SYSTEM_PROMPT = """You are an academic workload analyst. Given a student's pending
tasks and per-class workload summaries, estimate how demanding the coming
two weeks will be.

Respond with a single JSON object with exactly these keys:
- estimated_total_hours (number)
- stress_level (number, 1-10)
- recommended_daily_hours (number)
- peak_workload_dates (list of YYYY-MM-DD strings)
- recommendations (object with lists of strings: immediate_actions,
  schedule_adjustments, long_term_strategies)
- overload_risk (number, 0-1)
- deadline_conflicts (integer)
- burnout_risk (number, 0-1)"""


def build_estimation_messages(
    tasks: list[Task],
    class_workloads: list[ClassWorkload],
) -> list[dict]:
    """
    Build chat messages describing the workload to the model.

    Descriptions are truncated to ESTIMATOR_DESCRIPTION_TRUNCATE characters.
    """
    truncate = scheduling_settings.ESTIMATOR_DESCRIPTION_TRUNCATE
    task_summary = [
        {
            "title": task.title,
            "type": task.type,
            "due_date": task.due_date.isoformat() if task.due_date else None,
            "class": task.class_id,
            "description": (task.description or "")[:truncate],
        }
        for task in tasks
    ]
    payload = {
        "tasks": task_summary,
        "class_workloads": [cw.model_dump(mode="json") for cw in class_workloads],
    }
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": json.dumps(payload)},
    ]


def extract_json_object(response_text: str) -> Optional[Any]:
    """
    Extract a JSON object from a model response that may use markdown fences.

    Returns:
        Parsed JSON, or None if parsing fails
    """
    if not response_text:
        return None

    text = response_text.strip()
    match = re.search(r"```(?:json)?\s*([\s\S]*?)\s*```", text)
    if match:
        text = match.group(1).strip()

    try:
        return json.loads(text)
    except json.JSONDecodeError:
        match = re.search(r"(\{[\s\S]*\})", text)
        if match:
            try:
                return json.loads(match.group(1))
            except json.JSONDecodeError:
                return None
    return None


class LLMWorkloadEstimator:
    """
    WorkloadEstimator backed by a LiteLLM chat completion.

    Attributes:
        model: LiteLLM model identifier (provider/model-name)
        temperature: Sampling temperature
        max_tokens: Maximum tokens in the response
    """

    def __init__(
        self,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ):
        self.model = model or scheduling_settings.ESTIMATOR_MODEL or settings.TEXT_MODEL
        self.temperature = (
            temperature
            if temperature is not None
            else scheduling_settings.ESTIMATOR_TEMPERATURE
        )
        self.max_tokens = max_tokens or scheduling_settings.ESTIMATOR_MAX_TOKENS

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=30),
        retry=retry_if_exception_type(json.JSONDecodeError),
        reraise=True,
    )
    async def _complete_json(self, messages: list[dict]) -> Any:
        """Run the completion and parse its JSON body (retried on bad JSON)."""
        response = await acompletion(
            model=self.model,
            messages=messages,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            response_format={"type": "json_object"},
        )
        content = response.choices[0].message.content
        parsed = extract_json_object(content)
        if parsed is None:
            logger.warning(f"JSON decode error, will retry (model={self.model})")
            raise json.JSONDecodeError("No JSON object in response", content or "", 0)
        return parsed

    async def estimate_workload(
        self,
        tasks: list[Task],
        class_workloads: list[ClassWorkload],
    ) -> WorkloadEstimate:
        """
        Ask the model for a workload estimate.

        Args:
            tasks: Pending tasks considered in the analysis
            class_workloads: Per-class workload summaries

        Returns:
            Validated WorkloadEstimate

        Raises:
            EstimationHookError: If the call fails or the response is unusable
        """
        messages = build_estimation_messages(tasks, class_workloads)
        try:
            data = await self._complete_json(messages)
            estimate = WorkloadEstimate.model_validate(data)
        except json.JSONDecodeError as e:
            raise EstimationHookError(
                "Workload estimator returned invalid JSON",
                details={"model": self.model},
            ) from e
        except PydanticValidationError as e:
            raise EstimationHookError(
                "Workload estimator response failed validation",
                details={"model": self.model, "errors": e.error_count()},
            ) from e
        except Exception as e:
            logger.error(f"LLM workload estimation failed: {e} (model={self.model})")
            raise EstimationHookError(
                f"Workload estimator call failed: {e}",
                details={"model": self.model},
            ) from e

        logger.debug(
            f"LLM workload estimate [{self.model}]: "
            f"{estimate.estimated_total_hours:.1f}h, stress={estimate.stress_level}"
        )
        return estimate
