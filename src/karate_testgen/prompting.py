from __future__ import annotations

from karate_testgen.models import ChatMessage

SYSTEM_PROMPT = """
You are an expert software engineer with deep knowledge of Java Spring Boot, REST APIs, and Karate DSL.
Generate clean, runnable Karate test scripts for the REST endpoints defined in the given controller class.
"""

USER_PREAMBLE = "Here is a controller:\n\n"


def build_system_prompt() -> str:
    return SYSTEM_PROMPT


def build_user_prompt(controller_code: str) -> str:
    # Controller source goes in untouched.
    return USER_PREAMBLE + controller_code


def build_messages(controller_code: str) -> list[ChatMessage]:
    """Return the two-message conversation for one controller."""
    return [
        ChatMessage(role="system", content=build_system_prompt()),
        ChatMessage(role="user", content=build_user_prompt(controller_code)),
    ]
