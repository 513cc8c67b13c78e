"""
Editor assistant: runs an AI action on the open draft and replaces its
content with the result. The draft then follows the normal autosave path.
"""

from notewise.core.ai_client import AIServiceClient
from notewise.models import AIAction
from notewise.services.draft_controller import DraftController
from notewise.services.notifications import NotificationCenter
from notewise.utils.exceptions import NotewiseError
from notewise.utils.html import strip_html
from notewise.utils.logger import get_logger

logger = get_logger(__name__)

ACTION_LABELS = {
    AIAction.IMPROVE: "Text improved",
    AIAction.SUMMARIZE: "Summary generated",
    AIAction.EXPAND: "Content expanded",
    AIAction.TONE: "Tone adjusted",
    AIAction.GENERATE: "Content generated",
}


class EditorAssistant:
    def __init__(self, client: AIServiceClient, notifications: NotificationCenter | None = None):
        self.client = client
        self.notifications = notifications or NotificationCenter()

    async def run(
        self, controller: DraftController, action: AIAction, prompt: str | None = None
    ) -> bool:
        """
        Apply an AI action to the draft.

        `generate` works from the prompt; every other action works from the
        draft's plain text. Failures are reported and leave the draft as it was.

        Returns:
            True if the draft content was replaced
        """
        if action == AIAction.GENERATE:
            text = None
            if not prompt or not prompt.strip():
                self.notifications.error("Please enter a prompt first")
                return False
        else:
            text = strip_html(controller.draft.content)
            if not text:
                self.notifications.error("Please add some content first")
                return False

        try:
            response = await self.client.assist(action, content=text, prompt=prompt)
        except NotewiseError as e:
            logger.warning(
                f"AI {action.value} failed",
                extra={"error": str(e), "action": action.value, "note_id": controller.note_id},
            )
            self.notifications.error("AI request failed", error=e)
            return False

        if controller.closed:
            return False

        controller.set_content(response.result)
        self.notifications.success(ACTION_LABELS[action])
        return True
