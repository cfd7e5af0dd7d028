# File: rapier/sdk_generator.py
"""
Rapier - Callback-Driven SDK Generator
=======================================

A schema provider drives a ``CodeGenerator`` through a fixed lifecycle::

    start
    before_generating_types
        generate_type           (once per type)
    after_generating_types
    before_generating_methods
        generate_method         (once per method)
    after_generating_methods
    finish

``SwiftSDKGenerator`` appends rendered fragments to the two buffers of its
``GenerationContext`` and writes ``Types.<ext>`` and ``Methods.<ext>`` when
``finish()`` is called.  ``run_code_generator`` plays the role of the schema
provider for an in-memory ``SchemaDefinition``.
"""

from __future__ import annotations

import abc
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from rapier.models import GenerationConfig, MethodInfo, SchemaDefinition, TypeInfo
from rapier.templates import SwiftTemplates
from rapier.utils import write_file

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("rapier.sdk_generator")


# ---------------------------------------------------------------------------
# Lifecycle interface
# ---------------------------------------------------------------------------


class CodeGenerator(abc.ABC):
    """Callbacks a schema provider invokes, in declaration order."""

    def start(self) -> None:
        """Called once before anything else."""

    @abc.abstractmethod
    def before_generating_types(self) -> None: ...

    @abc.abstractmethod
    def generate_type(self, name: str, info: TypeInfo) -> None: ...

    def after_generating_types(self) -> None:
        """Called after the last type."""

    @abc.abstractmethod
    def before_generating_methods(self) -> None: ...

    @abc.abstractmethod
    def generate_method(self, name: str, info: MethodInfo) -> None: ...

    @abc.abstractmethod
    def after_generating_methods(self) -> None: ...

    @abc.abstractmethod
    def finish(self) -> None: ...


# ---------------------------------------------------------------------------
# Generation context
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class GenerationContext:
    """Output directory plus the two growing buffers."""

    directory: Path
    out_types: List[str] = field(default_factory=list)
    out_methods: List[str] = field(default_factory=list)

    @property
    def types_text(self) -> str:
        return "".join(self.out_types)

    @property
    def methods_text(self) -> str:
        return "".join(self.out_methods)


# ---------------------------------------------------------------------------
# Swift client generator
# ---------------------------------------------------------------------------


class SwiftSDKGenerator(CodeGenerator):
    """
    Emits a Swift client library: JSON-backed structs into ``Types.<ext>``
    and a ``public extension <client_type>`` of request methods into
    ``Methods.<ext>``.

    Not thread-safe.  Use one instance per output directory.
    """

    def __init__(
        self,
        directory: Path | str,
        config: Optional[GenerationConfig] = None,
    ) -> None:
        self._config: GenerationConfig = config or GenerationConfig(output_dir=str(directory))
        self._templates: SwiftTemplates = SwiftTemplates(self._config)
        self.context: GenerationContext = GenerationContext(directory=Path(directory))
        self.types_generated: int = 0
        self.methods_generated: int = 0
        # Path → bytes, filled by finish() as each write completes
        self.files_written: Dict[Path, int] = {}

    # -- Types --------------------------------------------------------------

    def before_generating_types(self) -> None:
        self.context.out_types.append(self._templates.render_types_header())

    def generate_type(self, name: str, info: TypeInfo) -> None:
        self.context.out_types.append(self._templates.render_type(name, info))
        self.types_generated += 1

    # -- Methods ------------------------------------------------------------

    def before_generating_methods(self) -> None:
        self.context.out_methods.append(self._templates.render_methods_header())

    def generate_method(self, name: str, info: MethodInfo) -> None:
        self.context.out_methods.append(self._templates.render_method(name, info))
        self.methods_generated += 1

    def after_generating_methods(self) -> None:
        self.context.out_methods.append(self._templates.render_methods_footer())

    # -- Output -------------------------------------------------------------

    def rendered_files(self) -> Dict[str, str]:
        """File name → full content, as ``finish()`` would write them."""
        return {
            self._config.types_filename: self.context.types_text,
            self._config.methods_filename: self.context.methods_text,
        }

    def finish(self) -> None:
        """
        Write the Types file, then the Methods file.

        Every completed write is recorded in ``files_written``, so callers
        can tell which files this run produced even when a later write fails.

        Raises:
            OSError: from whichever write fails first.  A Types file written
                before a failing Methods write is left in place.
        """
        for filename, content in self.rendered_files().items():
            path: Path = self.context.directory / filename
            byte_count: int = write_file(path, content)
            self.files_written[path] = byte_count
            logger.info("Wrote %s (%d bytes).", path, byte_count)


# ---------------------------------------------------------------------------
# Schema-driven runner
# ---------------------------------------------------------------------------


def run_code_generator(
    generator: CodeGenerator,
    schema: SchemaDefinition,
    *,
    write: bool = True,
) -> None:
    """
    Deliver *schema* to *generator* through the full callback sequence.

    With ``write=False`` the sequence stops before ``finish()``.
    """
    generator.start()

    generator.before_generating_types()
    for name, type_info in schema.types.items():
        logger.debug("Generating type '%s'.", name)
        generator.generate_type(name, type_info)
    generator.after_generating_types()

    generator.before_generating_methods()
    for name, method_info in schema.methods.items():
        logger.debug("Generating method '%s'.", name)
        generator.generate_method(name, method_info)
    generator.after_generating_methods()

    if write:
        generator.finish()
    else:
        logger.info("Skipping finish(): nothing written.")


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "CodeGenerator",
    "GenerationContext",
    "SwiftSDKGenerator",
    "run_code_generator",
]
