"""
Templating Context

Responsibilities:
- Tokenizes business templates ({{token}} and {{#if}} grammar)
- Resolves placeholders and conditional sections against layered contexts
- Builds context layers from domain records (lease, welcome letter, invoice)
- Fetches raw templates from the configured template store
- Renders authored HTML fragments (ledger rows, print shell)

Owns: Token grammar, resolution order, context layers, template sources
Never: Merges documents or decides page layout
"""

from rentdocs.contexts.templating.context_builder import (
    build_invoice_context,
    build_lease_context,
    build_welcome_letter_context,
    lease_predicates,
)
from rentdocs.contexts.templating.context_files import load_context_file
from rentdocs.contexts.templating.exceptions import TemplateFetchError, TemplateRenderError
from rentdocs.contexts.templating.fragment_registry import FragmentRegistry
from rentdocs.contexts.templating.resolution_context import ContextLayer, ResolutionContext
from rentdocs.contexts.templating.resolver import PlaceholderResolver, ResolutionResult, resolve
from rentdocs.contexts.templating.template_store import (
    AssetTemplateStore,
    RemoteTemplateStore,
    StaticTemplateStore,
    TemplateSource,
    TemplateSourceMode,
    TemplateStore,
    create_template_store,
    fetch_templates,
)
from rentdocs.contexts.templating.tokenizer import Token, TokenType, tokenize

__all__ = [
    # Resolution
    "resolve",
    "PlaceholderResolver",
    "ResolutionResult",
    "ResolutionContext",
    "ContextLayer",
    "tokenize",
    "Token",
    "TokenType",
    # Context building
    "build_lease_context",
    "build_welcome_letter_context",
    "build_invoice_context",
    "lease_predicates",
    "load_context_file",
    # Template sources
    "TemplateSource",
    "TemplateSourceMode",
    "TemplateStore",
    "AssetTemplateStore",
    "RemoteTemplateStore",
    "StaticTemplateStore",
    "create_template_store",
    "fetch_templates",
    # Fragments
    "FragmentRegistry",
    # Errors
    "TemplateFetchError",
    "TemplateRenderError",
]
