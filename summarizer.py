"""Gemini-backed summaries of completed work.

The summarizer only turns task snapshots into prose. Saving the result is a
separate call to the summaries API.
"""
import logging

from langchain_google_genai import ChatGoogleGenerativeAI

logger = logging.getLogger(__name__)

DEFAULT_MODEL = 'gemini-1.5-flash'

EMPTY_DAY_SUMMARY = "No tasks were completed today. Take some time to plan for tomorrow!"


class SummaryGenerationError(Exception):
    """Base class for summary failures; the message is safe to show users."""

    default_message = 'Failed to generate task summary. Please try again.'

    def __init__(self, message=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class SummaryNotConfiguredError(SummaryGenerationError):
    default_message = 'Gemini API is not configured'


class InvalidApiKeyError(SummaryGenerationError):
    default_message = 'Invalid Gemini API key. Please check your configuration.'


class QuotaExceededError(SummaryGenerationError):
    default_message = 'API quota exceeded. Please try again later.'


class ModelUnavailableError(SummaryGenerationError):
    default_message = 'Model not available. Please check if the model is accessible with your API key.'


def classify_provider_error(error):
    """Map a provider exception onto one of the user-facing error types."""
    text = str(error)
    lowered = text.lower()
    if 'API_KEY_INVALID' in text or 'api key not valid' in lowered:
        return InvalidApiKeyError()
    if 'QUOTA_EXCEEDED' in text or 'RESOURCE_EXHAUSTED' in text or 'quota' in lowered:
        return QuotaExceededError()
    if 'models/' in text and 'not found' in lowered:
        return ModelUnavailableError()
    return SummaryGenerationError()


def _field(task, name):
    if isinstance(task, dict):
        return task.get(name)
    return getattr(task, name, None)


def format_task_line(index, task):
    description = _field(task, 'description')
    line = f"{index}. {_field(task, 'title')}"
    if description:
        line += f" - {description}"
    return f"{line} ({_field(task, 'category')}, {_field(task, 'priority')} priority)"


def build_daily_prompt(date, completed_tasks):
    tasks_text = "\n".join(format_task_line(i, task) for i, task in enumerate(completed_tasks, start=1))
    return f"""
You are a productivity assistant. I completed the following tasks today ({date}):

{tasks_text}

Please generate a positive, encouraging summary of my accomplishments today. The summary should:
- Highlight what I achieved
- Mention the variety of areas I worked on
- Be motivating and acknowledge my progress
- Be 2-3 sentences long
- Use a warm, personal tone

Focus on productivity insights and patterns if you notice any.
""".strip()


def build_weekly_prompt(summaries):
    summaries_text = "\n".join(
        f"Day {i} ({_field(s, 'date')}): {_field(s, 'task_count')} tasks - {_field(s, 'summary')}"
        for i, s in enumerate(summaries, start=1)
    )
    return f"""
Based on these daily task summaries from the past week:

{summaries_text}

Please provide a weekly productivity summary that:
- Highlights overall progress and patterns
- Notes areas of consistency or growth
- Provides gentle suggestions for the upcoming week
- Maintains an encouraging tone
- Is 3-4 sentences long

Focus on productivity trends and celebrate achievements.
""".strip()


class TaskSummarizer:
    """Calls Gemini to describe a day's (or week's) completed work.

    ``llm`` may be any object with an ``invoke(prompt)`` method returning a
    message with ``content``; by default a ``ChatGoogleGenerativeAI`` client is
    built on first use from ``api_key``.
    """

    def __init__(self, api_key=None, model=DEFAULT_MODEL, llm=None):
        self.api_key = api_key
        self.model = model
        self._llm = llm

    @classmethod
    def from_config(cls, config):
        return cls(api_key=config.get('GOOGLE_API_KEY'), model=config.get('GEMINI_MODEL', DEFAULT_MODEL))

    @property
    def configured(self):
        return self._llm is not None or bool(self.api_key)

    def _get_llm(self):
        if self._llm is None:
            if not self.api_key:
                raise SummaryNotConfiguredError()
            self._llm = ChatGoogleGenerativeAI(model=self.model, google_api_key=self.api_key)
        return self._llm

    def _invoke(self, prompt):
        llm = self._get_llm()
        try:
            response = llm.invoke(prompt)
        except Exception as e:
            logger.error(f"Error generating summary: {e}")
            raise classify_provider_error(e) from e

        text = (getattr(response, 'content', None) or '').strip()
        if not text:
            logger.error("Gemini returned an empty summary")
            raise SummaryGenerationError()
        return text

    def generate_daily_summary(self, date, completed_tasks):
        if not completed_tasks:
            return EMPTY_DAY_SUMMARY
        return self._invoke(build_daily_prompt(date, completed_tasks))

    def generate_weekly_summary(self, summaries):
        if not summaries:
            raise SummaryGenerationError('Cannot generate weekly summary')
        if not self.configured:
            raise SummaryNotConfiguredError('Cannot generate weekly summary')
        return self._invoke(build_weekly_prompt(summaries))
