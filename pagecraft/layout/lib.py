"""Layout generator: turns layout specifications into definition maps.

Each layout becomes one canvas node under ROOT whose children are the
generated elements. Elements are produced first so the layout node can list
their ids, then the layout's own props are generated with one model call.
"""

import asyncio
import logging
from dataclasses import dataclass, field

from pagecraft.components import (
    ComponentRegistry,
    GenerationContext,
    build_component_registry,
    parse_props,
    resolve_element_kind,
)
from pagecraft.components.base import ComponentGenerator
from pagecraft.config import EnvVar, get_environment
from pagecraft.llm.adapter import ModelAdapter
from pagecraft.schema import (
    LAYOUT_PROPS_MODELS,
    BasicElement,
    Definition,
    LayoutKind,
    LayoutSpec,
    Node,
    ParentRequirements,
)
from pagecraft.tree import ROOT_ID, merge_definitions

from .prompt import build_layout_messages

logger = logging.getLogger(__name__)

STATUS_PREFIX = "layout-processing"


@dataclass
class LayoutGeneratorConfig:
    """Configuration for layout processing.

    Attributes:
        concurrent_elements: Generate the elements of one layout concurrently.
            Child order always follows the requested order.
    """

    concurrent_elements: bool = False

    @classmethod
    def from_env(cls) -> "LayoutGeneratorConfig":
        return cls(concurrent_elements=get_environment(EnvVar.LAYOUT_CONCURRENT_ELEMENTS))


@dataclass
class LayoutProcessingResult:
    """Output of processing every layout of a page.

    Attributes:
        definition: All layout and element entries.
        layout_ids: Top-level layout ids in page order.
    """

    definition: Definition = field(default_factory=dict)
    layout_ids: list[str] = field(default_factory=list)


class LayoutGenerator:
    """Generates layouts and their elements.

    Holds only the adapter, the generator registry and its configuration;
    per-request state travels in the ``GenerationContext``.

    Example:
        >>> generator = LayoutGenerator(adapter)
        >>> ctx = GenerationContext(emit=LoggingStatusSink())
        >>> result = await generator.process_layouts(layouts, ROOT_DESIGN_REQUIREMENTS, ctx)
        >>> result.layout_ids
        ['3f9a0c1b2d', 'a81f3e0921']
    """

    def __init__(
        self,
        adapter: ModelAdapter,
        registry: ComponentRegistry | None = None,
        config: LayoutGeneratorConfig | None = None,
    ):
        self.adapter = adapter
        self.registry = registry if registry is not None else build_component_registry(adapter)
        self.config = config or LayoutGeneratorConfig.from_env()
        logger.info(
            "Initialized LayoutGenerator with tools: %s",
            ", ".join(kind.value for kind in self.registry),
        )

    # =========================================================================
    # Pages
    # =========================================================================

    async def process_layouts(
        self,
        layouts: list[LayoutSpec],
        parent_requirements: ParentRequirements,
        ctx: GenerationContext,
    ) -> LayoutProcessingResult:
        """Process every layout of a page in ``index`` order.

        Layouts with equal indices keep their input order. Processing stops
        at the first failing layout.

        Args:
            layouts: Layouts requested by the model.
            parent_requirements: Page-level requirements given to every layout.
            ctx: Request-scoped context.

        Returns:
            LayoutProcessingResult with the merged definition and layout ids.
        """
        emit = ctx.emit
        emit(STATUS_PREFIX, f"Starting to process {len(layouts)} layouts")

        ordered = sorted(layouts, key=lambda layout: layout.index)
        emit(STATUS_PREFIX, "Layouts sorted by index")

        result = LayoutProcessingResult()
        for position, layout in enumerate(ordered, start=1):
            emit(STATUS_PREFIX, f"Processing layout {position} of {len(ordered)}")
            layout_definition = await self.process_single_layout(layout, parent_requirements, ctx)
            result.layout_ids.append(next(iter(layout_definition)))
            merge_definitions(result.definition, layout_definition)

        emit(STATUS_PREFIX, "All layouts processed successfully")
        return result

    # =========================================================================
    # Single layout
    # =========================================================================

    async def process_single_layout(
        self,
        layout: LayoutSpec,
        parent_requirements: ParentRequirements,
        ctx: GenerationContext,
    ) -> Definition:
        """Generate one layout node and its children.

        Args:
            layout: The layout to build.
            parent_requirements: Requirements of the page root.
            ctx: Request-scoped context.

        Returns:
            Map with the layout entry first, then its children in order.

        Raises:
            ModelCallError: If any model call fails.
            MalformedResponseError: If any response has the wrong shape.
        """
        emit = ctx.emit
        emit(STATUS_PREFIX, "Starting to process single layout")

        layout_kind = layout.layout_type
        layout_id = ctx.ids.layout_id()
        emit(STATUS_PREFIX, f"Processing layout type: {layout_kind.value} with ID: {layout_id}")

        try:
            children = await self.process_basic_elements(
                layout.basic_elements, layout.layout_requirements, layout_id, ctx
            )
            props = await self.generate_layout_definition(
                layout_kind, layout.layout_requirements, parent_requirements, ctx
            )
        except Exception as e:
            emit("error", f"Error processing layout: {e}")
            raise

        node = Node.create(
            layout_kind.node_kind,
            props=props,
            display_name=ctx.ids.display_name(layout_kind.value, layout=True),
            parent=ROOT_ID,
            is_canvas=True,
            nodes=list(children),
        )
        definition: Definition = {layout_id: node}
        merge_definitions(definition, children)

        emit(
            STATUS_PREFIX,
            f"Layout {layout_id} processing completed with {len(children)} child components",
        )
        return definition

    async def generate_layout_definition(
        self,
        layout_kind: LayoutKind,
        layout_requirements: str,
        parent_requirements: ParentRequirements,
        ctx: GenerationContext,
    ) -> dict:
        """Generate the props of one layout node with a single model call."""
        ctx.emit(STATUS_PREFIX, f"Generating layout definition for type: {layout_kind.value}")
        response = await self.adapter.call_model(
            STATUS_PREFIX,
            build_layout_messages(layout_kind, layout_requirements, parent_requirements),
            emit=ctx.emit,
        )
        return parse_props(
            response.text, LAYOUT_PROPS_MODELS[layout_kind], f"{layout_kind.value} layout"
        )

    # =========================================================================
    # Elements
    # =========================================================================

    async def process_basic_elements(
        self,
        elements: list[BasicElement],
        layout_requirements: str,
        layout_id: str,
        ctx: GenerationContext,
    ) -> Definition:
        """Generate the element children of one layout.

        Element types without a generator are skipped. The layout's
        requirements are the parent requirements of every element.

        Args:
            elements: Requested elements in order.
            layout_requirements: Requirements of the owning layout.
            layout_id: Id of the owning layout.
            ctx: Request-scoped context.

        Returns:
            Child entries in requested order.
        """
        emit = ctx.emit
        total = len(elements)
        emit(STATUS_PREFIX, f"Number of basic elements to process: {total}")

        children: Definition = {}
        planned: list[tuple[ComponentGenerator, BasicElement]] = []
        for position, element in enumerate(elements, start=1):
            element_type = element.element_type
            emit(STATUS_PREFIX, f"Processing element {position} of {total}, type: {element_type}")

            kind = resolve_element_kind(element_type)
            generator = self.registry.get(kind) if kind is not None else None
            if generator is None:
                logger.warning("Skipping unsupported element type: %s", element_type)
                emit(STATUS_PREFIX, f"Unsupported element type: {element_type}, skipping")
                continue

            emit(STATUS_PREFIX, f"Using {element_type} generator tool")
            if self.config.concurrent_elements:
                planned.append((generator, element))
                continue

            generated = await self._generate_element(
                generator, element, layout_requirements, layout_id, ctx
            )
            merge_definitions(children, generated)

        if planned:
            children = await self._generate_concurrently(
                planned, layout_requirements, layout_id, ctx
            )

        emit(STATUS_PREFIX, f"Completed processing {len(children)} basic elements")
        return children

    async def _generate_element(
        self,
        generator: ComponentGenerator,
        element: BasicElement,
        layout_requirements: str,
        layout_id: str,
        ctx: GenerationContext,
    ) -> Definition:
        generated = await generator.generate(
            element.element_requirements, layout_requirements, layout_id, ctx
        )
        ctx.emit(STATUS_PREFIX, f"Successfully generated {element.element_type} component")
        return generated

    async def _generate_concurrently(
        self,
        planned: list[tuple[ComponentGenerator, BasicElement]],
        layout_requirements: str,
        layout_id: str,
        ctx: GenerationContext,
    ) -> Definition:
        tasks = [
            asyncio.ensure_future(
                self._generate_element(generator, element, layout_requirements, layout_id, ctx)
            )
            for generator, element in planned
        ]
        try:
            results = await asyncio.gather(*tasks)
        except Exception:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        children: Definition = {}
        for generated in results:
            merge_definitions(children, generated)
        return children


__all__ = [
    "STATUS_PREFIX",
    "LayoutGeneratorConfig",
    "LayoutProcessingResult",
    "LayoutGenerator",
]
