"""AI code actions offered to the editor."""

import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional

import attrs
from lsprotocol.types import CodeAction, CodeActionKind, Range, TextEdit, WorkspaceEdit
from pydantic import ValidationError

from .documents import DocumentStore
from .errors import AcaiError, InvalidActionError
from .models import CodeActionData
from .operations import Complete, Document, Fix, Instruct, Optimize, Suggest

logger = logging.getLogger(__name__)

# Runs an operation on the extracted context and returns the replacement text
OperationRunner = Callable[[Optional[str]], Awaitable[Optional[str]]]


class AiCodeAction(Enum):
    """Catalog of code actions, in the order they are offered."""
    INSTRUCT = ("ai.instruct", "Acai - Instruct")
    DOCUMENT = ("ai.document", "Acai - Document")
    FIX = ("ai.fix", "Acai - Fix")
    OPTIMIZE = ("ai.optimize", "Acai - Optimize")
    SUGGEST = ("ai.suggest", "Acai - Suggest")
    FILL_IN_MIDDLE = ("ai.fillInMiddle", "Acai - Fill in middle")
    TEST = ("ai.test", "Acai - Test")

    def __init__(self, identifier: str, label: str):
        self.identifier = identifier
        self.label = label

    @classmethod
    def from_identifier(cls, identifier: str) -> "AiCodeAction":
        for action in cls:
            if action.identifier == identifier:
                return action
        raise InvalidActionError(f"Invalid command `{identifier}`", action_id=identifier)


def decode_action_data(data: Any) -> CodeActionData:
    """Validate resolution data returned by the editor."""
    if data is None:
        raise InvalidActionError("Code action has no resolution data")
    try:
        return CodeActionData.model_validate(data)
    except ValidationError as e:
        raise InvalidActionError(f"Malformed code action data: {e}") from e


def _chat_runner(operation_cls) -> OperationRunner:
    async def run(context: Optional[str]) -> Optional[str]:
        response = await operation_cls(context=context).send()
        return response.content if response is not None else None
    return run


async def _fill_in_middle(context: Optional[str]) -> Optional[str]:
    return await Complete(context=context).send()


DEFAULT_RUNNERS: Dict[AiCodeAction, OperationRunner] = {
    AiCodeAction.INSTRUCT: _chat_runner(Instruct),
    AiCodeAction.DOCUMENT: _chat_runner(Document),
    AiCodeAction.FIX: _chat_runner(Fix),
    AiCodeAction.OPTIMIZE: _chat_runner(Optimize),
    AiCodeAction.SUGGEST: _chat_runner(Suggest),
    AiCodeAction.FILL_IN_MIDDLE: _fill_in_middle,
}


class CodeActionController:
    """
    Offers the AI action catalog and turns a chosen action into an edit.

    Handles:
    - One descriptor per catalog entry, each carrying its resolution data
    - Context lookup in the document store on resolve
    - Dispatch to the action's operation
    - A single replacement edit over the lines the operation saw
    """

    def __init__(
        self,
        documents: DocumentStore,
        runners: Optional[Dict[AiCodeAction, OperationRunner]] = None,
    ):
        self.documents = documents
        self.runners = dict(DEFAULT_RUNNERS if runners is None else runners)

    def offer(self, document_uri: str, range: Range) -> List[CodeAction]:
        """Code action descriptors for a range, independent of diagnostics."""
        actions = []
        for action in AiCodeAction:
            data = CodeActionData(id=action.identifier, document_uri=document_uri, range=range)
            actions.append(CodeAction(
                title=action.label,
                kind=CodeActionKind.QuickFix,
                is_preferred=True,
                data=data.model_dump(),
            ))
        return actions

    async def execute(self, action: AiCodeAction, context: Optional[str]) -> Optional[str]:
        """Run the action's operation. The test action produces nothing."""
        if action == AiCodeAction.TEST:
            return None
        runner = self.runners.get(action)
        if runner is None:
            logger.warning(f"No operation registered for {action.identifier}")
            return None
        return await runner(context)

    async def resolve(self, code_action: CodeAction) -> CodeAction:
        """
        Resolve a descriptor into a code action with an edit.

        The action comes back without an edit when the data cannot be
        decoded, the operation fails or no reply was produced. The edit
        covers the requested lines that exist in the tracked text.
        """
        title = code_action.title

        try:
            data = decode_action_data(code_action.data)
            action = AiCodeAction.from_identifier(data.id)
        except InvalidActionError as e:
            logger.error(f"Cannot resolve code action {title!r}: {e}")
            return code_action

        context, edit_range = await self.documents.extract_selection(data.document_uri, data.range)
        if context is None:
            logger.info(f"No tracked text for {data.document_uri}, running {action.identifier} without context")

        logger.info(f"Executing {title or action.label}")
        try:
            reply = await self.execute(action, context)
        except AcaiError as e:
            logger.error(f"{action.identifier} failed: {e}")
            return code_action

        if reply is None:
            logger.info(f"{action.identifier} produced no edit")
            return code_action

        edit = TextEdit(range=edit_range, new_text=reply)
        return attrs.evolve(code_action, edit=WorkspaceEdit(changes={data.document_uri: [edit]}))
