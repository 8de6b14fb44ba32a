"""
Username Service

Username format rules, availability checks and AI-generated suggestions.
"""

import logging

from openai import AsyncOpenAI, OpenAIError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import Settings
from app.core.exceptions import ConfigurationError, SuggestionServiceError
from app.core.security import is_valid_username
from app.models.user import User


logger = logging.getLogger(__name__)

SUGGESTION_PROMPT = """Generate creative usernames following these strict requirements:
- Length: 3-20 characters only
- Characters: Only letters (a-z) and numbers (0-9), no special characters
- Style: All lowercase
- Sources: Anime characters, famous things

Categories to generate from:
1. Popular or simple anime character names (modified for uniqueness)
2. Famous historical/modern figures
3. Creative combinations of words + numbers

Each username must:
- Be memorable and easy to type
- Be unique and simple
- Follow the regex pattern: ^[a-z0-9]+$

OUTPUT FORMAT: Return exactly 5 usernames, each on a separate line with no explanations, categories, numbers, or additional text. Just the usernames.

Example output format:
codeluffy
zoro
quantum42
mario
pikachu

Generate unique 5 usernames now:"""


class UsernameGenerator:
    """
    Text-generation collaborator backed by the OpenAI chat completions API.

    Takes its credentials explicitly; see ``build_username_generator``.
    """

    def __init__(self, api_key: str, model: str) -> None:
        if not api_key:
            raise ConfigurationError("OPENAI_API_KEY must be set!")
        self.model = model
        self._client = AsyncOpenAI(api_key=api_key)

    async def generate(self, prompt: str) -> str:
        """
        Send the prompt and return the raw completion text.

        Raises:
            SuggestionServiceError: The API call failed.
        """
        try:
            response = await self._client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=0.9,
            )
        except OpenAIError as e:
            logger.error("Username generation failed: %s", e)
            raise SuggestionServiceError() from e

        return response.choices[0].message.content or ""


def build_username_generator(config: Settings) -> UsernameGenerator:
    return UsernameGenerator(api_key=config.OPENAI_API_KEY, model=config.OPENAI_MODEL)


async def is_username_taken(db: AsyncSession, username: str) -> bool:
    result = await db.execute(
        select(User.id).where(User.username == username.strip().lower())
    )
    return result.first() is not None


async def suggest_usernames(db: AsyncSession, generator: UsernameGenerator) -> list[str]:
    """
    Ask the generator for usernames and keep the usable ones.

    A candidate survives if it passes is_valid_username (lowercase letters
    and digits, 3-20 chars) and no account already uses it. Generator
    errors propagate; there is no retry and no fallback list.

    Returns:
        list[str]: Available usernames in the order generated; may be empty.
    """
    raw = await generator.generate(SUGGESTION_PROMPT)

    candidates: list[str] = []
    for line in raw.splitlines():
        candidate = line.strip()
        if candidate and candidate not in candidates and is_valid_username(candidate):
            candidates.append(candidate)

    if not candidates:
        return []

    result = await db.execute(
        select(User.username).where(User.username.in_(candidates))
    )
    taken = set(result.scalars().all())

    return [candidate for candidate in candidates if candidate not in taken]
