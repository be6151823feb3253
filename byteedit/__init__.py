"""
ByteEdit - Remote Binary Editing Session Client

A client for driving editing sessions held by a remote binary-editing
server, without ever loading the edited file into local memory.

Architecture:
- Each module is self-contained with clear interfaces
- Modules receive their collaborators through their constructors
- No module knows the internals of another
- All server communication goes through the transport protocol

Modules:
- api: Request/response models shared by all modules
- rpc: Call plumbing, error classification
- transport: Wire binding to the editing server
- session: Session lifecycle (create, save, transactions)
- query: Read-only session queries and search
- change: Insert, overwrite and delete through the edit primitive
- replace: Bulk and iterative search/replace
"""

from .client import ClientFactory, EditClient

__version__ = "1.0.0"

__all__ = ["ClientFactory", "EditClient", "__version__"]
