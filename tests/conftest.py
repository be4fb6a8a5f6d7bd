import dataclasses
import random
import typing

import pytest

import tessitura.context
import tessitura.key
import tessitura.timing
import tessitura.tree


@dataclasses.dataclass(frozen=True)
class Root:

	"""Stand-in root element for hand-built trees."""


class TreeBuilder:

	"""Builds small render trees by hand so renderers can be called directly."""

	def __init__ (self, span: tessitura.timing.Span, seed: int = 1) -> None:

		self.tree = tessitura.tree.RenderTree()
		self.root = self.tree.add_root(Root(), span, seed)


	def add (
		self,
		element: typing.Any,
		span: tessitura.timing.Span,
		parent: typing.Optional[tessitura.tree.RenderNode] = None,
		name: typing.Optional[str] = None
	) -> tessitura.tree.RenderNode:

		"""Attach an element under ``parent`` (default: the root)."""

		return self.tree.add_child(parent or self.root, tessitura.tree.Segment(element, span, name))


	def context (self, node: tessitura.tree.RenderNode, beat_length: int = 24) -> tessitura.context.RenderContext:

		"""Return a render context bound to ``node``."""

		return tessitura.context.RenderContext(self.tree, node, beat_length)


@pytest.fixture
def c_major () -> tessitura.key.Key:

	"""C major (ionian)."""

	return tessitura.key.Key(tonic=0)


@pytest.fixture
def four_four () -> tessitura.timing.TimeSignature:

	"""4/4 at 24 pulses per beat."""

	return tessitura.timing.TimeSignature(beats_per_bar=4)


@pytest.fixture
def rng () -> random.Random:

	"""A fixed-seed RNG."""

	return random.Random(42)


@pytest.fixture
def builder () -> typing.Callable[..., TreeBuilder]:

	"""Factory for :class:`TreeBuilder` instances."""

	def make (span: tessitura.timing.Span = tessitura.timing.Span(0, 384), seed: int = 1) -> TreeBuilder:
		return TreeBuilder(span, seed)

	return make
