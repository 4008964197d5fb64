"""
Acai coding assistant

One message-oriented contract over several LLM HTTP APIs, exposed through
a command line and a language server.

Components:
- providers: model catalog, endpoints, credential variables
- models: canonical messages and code action resolution data
- adapters: provider response parsing
- chat_client: multi-turn chat completion sessions
- completion_client: fill-in-middle code completion
- documents: open-document text tracking
- code_actions: AI quick fixes offered to the editor
- lsp_server: pygls language server over stdio
- cli: command line entry point
"""

__version__ = "0.1.0"
