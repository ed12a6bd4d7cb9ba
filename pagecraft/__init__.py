"""pagecraft: LLM-driven page layout generation for visual page editors."""

from pagecraft.layout import LayoutGenerator, LayoutGeneratorConfig
from pagecraft.llm import ModelAdapter, create_llm_backend
from pagecraft.schema import Definition, ElementKind, LayoutKind, Node, NodeKind
from pagecraft.session import LayoutDesignService, LayoutDesignSession
from pagecraft.tree import ROOT_ID, definition_to_dict, validate_definition

__all__ = [
    # Data model
    "Node",
    "NodeKind",
    "LayoutKind",
    "ElementKind",
    "Definition",
    "ROOT_ID",
    "definition_to_dict",
    "validate_definition",
    # Generation
    "ModelAdapter",
    "create_llm_backend",
    "LayoutGenerator",
    "LayoutGeneratorConfig",
    "LayoutDesignSession",
    "LayoutDesignService",
]
