"""
Language server over stdio.

Framing, JSON-RPC routing, the shutdown/exit lifecycle and requests to
the editor are handled by pygls. The features below keep the document
store in sync and turn code actions into AI edits.

Features:
    initialize / initialized
    textDocument/didOpen, didSave, didChange, didClose
    textDocument/codeAction, codeAction/resolve
    textDocument/completion
    workspace/executeCommand (codingassistant/instruct)
"""

import asyncio
import logging
from typing import Any, Callable, List, Optional

from lsprotocol import types
from pygls.exceptions import JsonRpcException
from pygls.server import LanguageServer

from . import __version__
from .code_actions import AiCodeAction, CodeActionController
from .documents import DocumentStore
from .errors import AcaiError

logger = logging.getLogger(__name__)

INSTRUCT_COMMAND = "codingassistant/instruct"
# Lines above the cursor sent as completion context
COMPLETION_CONTEXT_LINES = 3
# Seconds to wait for the editor to answer workspace/applyEdit
APPLY_EDIT_TIMEOUT = 30.0

WORKSPACE_NOTES = {
    types.WORKSPACE_DID_CHANGE_WORKSPACE_FOLDERS: "workspace folders changed!",
    types.WORKSPACE_DID_CHANGE_CONFIGURATION: "configuration changed!",
    types.WORKSPACE_DID_CHANGE_WATCHED_FILES: "watched files have changed!",
}


class AcaiLanguageServer(LanguageServer):
    """
    Editor integration server.

    Handles:
    - Document text tracking through the DocumentStore
    - AI code actions through the CodeActionController
    - Fill-in-middle completion for the lines above the cursor
    - window/logMessage progress notes for the editor
    """

    def __init__(
        self,
        documents: Optional[DocumentStore] = None,
        controller: Optional[CodeActionController] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        super().__init__(
            "acai",
            f"v{__version__}",
            loop=loop,
            text_document_sync_kind=types.TextDocumentSyncKind.Full,
        )
        self.documents = documents or DocumentStore()
        self.controller = controller or CodeActionController(self.documents)

    def log_message(self, message: str, msg_type: types.MessageType = types.MessageType.Info) -> None:
        """Log locally and in the editor's output window."""
        logger.log(logging.ERROR if msg_type == types.MessageType.Error else logging.INFO, message)
        self.show_message_log(message, msg_type)


# =============================================================================
# Lifecycle
# =============================================================================

def initialize(ls: AcaiLanguageServer, params: types.InitializeParams) -> None:
    root = params.root_uri or params.root_path or "<no workspace>"
    ls.log_message(f"Initializing {root}")


def initialized(ls: AcaiLanguageServer, params: types.InitializedParams) -> None:
    ls.log_message("initialized!")


def _workspace_note(text: str) -> Callable[[AcaiLanguageServer, Any], None]:
    def note(ls: AcaiLanguageServer, params: Any) -> None:
        ls.log_message(text)
    return note


# =============================================================================
# Text synchronization
# =============================================================================

async def did_open(ls: AcaiLanguageServer, params: types.DidOpenTextDocumentParams) -> None:
    document = params.text_document
    ls.log_message(f"file opened! {document.uri}")
    await ls.documents.insert_on_open(document.uri, document.text)


async def did_save(ls: AcaiLanguageServer, params: types.DidSaveTextDocumentParams) -> None:
    uri = params.text_document.uri
    ls.log_message(f"file saved! {uri}")
    await ls.documents.replace_on_save(uri, params.text)


async def did_change(ls: AcaiLanguageServer, params: types.DidChangeTextDocumentParams) -> None:
    uri = params.text_document.uri
    logger.debug(f"file changed! {uri} ({len(params.content_changes)} changes)")
    await ls.documents.apply_changes(uri, params.content_changes)


async def did_close(ls: AcaiLanguageServer, params: types.DidCloseTextDocumentParams) -> None:
    ls.log_message("file closed!")
    await ls.documents.close(params.text_document.uri)


# =============================================================================
# Features
# =============================================================================

def code_action(ls: AcaiLanguageServer, params: types.CodeActionParams) -> List[types.CodeAction]:
    ls.log_message("code action!")
    return ls.controller.offer(params.text_document.uri, params.range)


async def code_action_resolve(ls: AcaiLanguageServer, params: types.CodeAction) -> types.CodeAction:
    ls.log_message(f"Executing {params.title}")
    resolved = await ls.controller.resolve(params)
    if resolved.edit is None:
        ls.log_message(f"{params.title} produced no edit")
    return resolved


async def completion(ls: AcaiLanguageServer, params: types.CompletionParams) -> Optional[List[types.CompletionItem]]:
    uri = params.text_document.uri
    position = params.position
    range = types.Range(
        start=types.Position(line=max(position.line - COMPLETION_CONTEXT_LINES, 0), character=0),
        end=position,
    )

    context = await ls.documents.extract_range(uri, range)
    if context is None:
        ls.log_message(f"completion: {uri} is not tracked")
        return None

    try:
        text = await ls.controller.execute(AiCodeAction.FILL_IN_MIDDLE, context)
    except AcaiError as e:
        ls.log_message(f"completion failed: {e}", types.MessageType.Error)
        return None

    if text is None:
        return None
    return [types.CompletionItem(label=text, detail=text)]


async def instruct_command(ls: AcaiLanguageServer, arguments: Optional[List[Any]]) -> None:
    """Ask the editor to apply a workspace edit and report its answer."""
    ls.log_message(f"command executed! {INSTRUCT_COMMAND}")

    params = types.ApplyWorkspaceEditParams(edit=types.WorkspaceEdit())
    try:
        result = await asyncio.wait_for(
            ls.lsp.send_request_async(types.WORKSPACE_APPLY_EDIT, params),
            timeout=APPLY_EDIT_TIMEOUT,
        )
    except asyncio.TimeoutError:
        ls.log_message(f"No answer to workspace/applyEdit after {APPLY_EDIT_TIMEOUT}s", types.MessageType.Error)
        return None
    except JsonRpcException as e:
        ls.log_message(f"workspace/applyEdit failed: {e}", types.MessageType.Error)
        return None

    ls.log_message("applied" if getattr(result, "applied", False) else "rejected")
    return None


# =============================================================================
# Server
# =============================================================================

def create_server(
    documents: Optional[DocumentStore] = None,
    controller: Optional[CodeActionController] = None,
    loop: Optional[asyncio.AbstractEventLoop] = None,
) -> AcaiLanguageServer:
    """Build a server with every feature registered."""
    server = AcaiLanguageServer(documents, controller, loop=loop)

    server.feature(types.INITIALIZE)(initialize)
    server.feature(types.INITIALIZED)(initialized)
    server.feature(types.TEXT_DOCUMENT_DID_OPEN)(did_open)
    server.feature(types.TEXT_DOCUMENT_DID_SAVE, types.SaveOptions(include_text=True))(did_save)
    server.feature(types.TEXT_DOCUMENT_DID_CHANGE)(did_change)
    server.feature(types.TEXT_DOCUMENT_DID_CLOSE)(did_close)
    server.feature(
        types.TEXT_DOCUMENT_CODE_ACTION,
        types.CodeActionOptions(code_action_kinds=[types.CodeActionKind.QuickFix], resolve_provider=True),
    )(code_action)
    server.feature(types.CODE_ACTION_RESOLVE)(code_action_resolve)
    server.feature(types.TEXT_DOCUMENT_COMPLETION)(completion)
    server.command(INSTRUCT_COMMAND)(instruct_command)
    for method, text in WORKSPACE_NOTES.items():
        server.feature(method)(_workspace_note(text))

    return server


def start_stdio(server: Optional[AcaiLanguageServer] = None) -> None:
    """Run a language server on the process stdin/stdout until exit."""
    server = server or create_server()
    logger.info("Language server started")
    server.start_io()
    logger.info("Language server stopped")
