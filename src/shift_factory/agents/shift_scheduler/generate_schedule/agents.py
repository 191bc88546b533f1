import asyncio

from google.adk.agents import Agent
from google.adk.models.lite_llm import LiteLlm
from google.adk.runners import Runner
from google.adk.sessions import InMemorySessionService
from google.genai import types

from shift_factory.agents.shift_scheduler.generate_schedule.prompts import (
    model_description,
)
from shift_factory.config import SchedulerSettings
from shift_factory.errors import ExternalServiceError

APP_NAME = "shift-factory"
USER_ID = "scheduler"
model_name = "shift_scheduler_agent"
output_key = "schedule_response"

# The full instruction travels in the user message; keep this one free of
# braces so ADK does not try to template it.
agent_instruction = """
Follow the scheduling request in the user message exactly.
Reply with the JSON array only.
"""


def make_shift_scheduler_agent(settings: SchedulerSettings) -> Agent:
    return Agent(
        model=LiteLlm(
            model=settings.model.default_model, api_key=settings.require_api_key()
        ),
        name=model_name,
        instruction=agent_instruction,
        description=model_description,
        generate_content_config=types.GenerateContentConfig(
            temperature=settings.model.temperature
        ),
        output_key=output_key,
    )


async def request_schedule(prompt: str, settings: SchedulerSettings) -> str:
    """
    Single blocking request to the scheduling model, bounded by
    settings.model.timeout_seconds. No retries.
    """
    agent = make_shift_scheduler_agent(settings)

    session_service = InMemorySessionService()
    session = await session_service.create_session(app_name=APP_NAME, user_id=USER_ID)
    runner = Runner(agent=agent, app_name=APP_NAME, session_service=session_service)
    new_message = types.Content(role="user", parts=[types.Part(text=prompt)])

    async def _drain():
        async for _ in runner.run_async(
            user_id=USER_ID, session_id=session.id, new_message=new_message
        ):
            pass

    try:
        await asyncio.wait_for(_drain(), timeout=settings.model.timeout_seconds)
    except asyncio.TimeoutError as e:
        raise ExternalServiceError(
            f"ChatCompletion timed out after {settings.model.timeout_seconds}s"
        ) from e
    except Exception as e:
        raise ExternalServiceError(f"ChatCompletion error: {e!r}") from e

    refreshed = await session_service.get_session(
        app_name=APP_NAME, user_id=USER_ID, session_id=session.id
    )
    response = refreshed.state.get(output_key) if refreshed else None
    if not response or not str(response).strip():
        raise ExternalServiceError("no choices returned from API")
    return str(response)
