"""
Fren Core

Permissioned request-handling core for an AI provider embedded in a host
application. Calling contexts ("origins") send capability-scoped requests;
the core keeps durable per-user state (provider configuration, per-origin
grants, a document embedding index) and answers pass-through AI calls and
retrieval-augmented queries.

Key components:
- core/: Core types, exceptions, and logging utilities
- contracts/: Typed parsing of inbound request params
- storage/: Blob store backends and the read-modify-write state store
- config/: Provider configuration record and host runtime settings
- host/: Dialog collaborator interface and dialog copy
- permissions/: Per-origin consent grants
- retrieval/: Embedding index and informed queries
- providers/: Embedding/chat provider adapters
- runners/: Request dispatcher and method table
"""

__version__ = "0.1.0"
