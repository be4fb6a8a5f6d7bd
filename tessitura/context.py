"""Read-only context queries for renderers.

A renderer receives a :class:`RenderContext` bound to the node it is
rendering. ``context.find(ElementType)`` starts a :class:`Query` that can be
narrowed by timing relation and ancestry, then resolved with ``get``,
``get_all``, ``require`` or ``require_all``. The ``require`` forms raise
:class:`~tessitura.errors.MissingContext`, which tells the engine to try the
renderer again once more of the tree exists.

Example:
	```python
	key = context.find(tessitura.key.Key).with_timing(DURING, span).require().element
	chords = (
		context.find(tessitura.chords.Chord)
		.within(tessitura.chord_progression.ChordMarkers)
		.with_timing(OVERLAPPING, span)
		.require_all()
	)
	```
"""

import random
import typing

import tessitura.errors
import tessitura.seeding
import tessitura.timing
import tessitura.tree


NodePredicate = typing.Callable[[tessitura.tree.RenderNode], bool]


class Query:

	"""A chainable lookup over the render tree for one element type."""

	def __init__ (self, context: "RenderContext", element_type: type) -> None:

		self._context = context
		self._element_type = element_type
		self._filters: typing.List[NodePredicate] = []
		self._descriptions: typing.List[str] = []
		self._impossible = False


	def with_timing (self, relation: tessitura.timing.TimingRelation, span: tessitura.timing.Span) -> "Query":

		"""
		Keep matches whose span stands in ``relation`` to ``span``.
		"""

		self._filters.append(lambda node: relation.matches(node.span, span))
		self._descriptions.append(f"{relation.value} {span.start}-{span.end}")

		return self


	def within_ancestor (self, ancestor_type: type) -> "Query":

		"""
		Keep matches under the querying node's nearest ``ancestor_type`` ancestor.
		"""

		tree = self._context.tree
		ancestor = tree.nearest_ancestor(self._context.node, ancestor_type)
		self._descriptions.append(f"within nearest {ancestor_type.__name__}")

		if ancestor is None:
			self._impossible = True

		else:
			self._filters.append(lambda node: tree.is_descendant(node, ancestor))

		return self


	def within (self, ancestor_type: type) -> "Query":

		"""
		Keep matches that have any ``ancestor_type`` ancestor of their own.
		"""

		tree = self._context.tree
		self._filters.append(lambda node: tree.nearest_ancestor(node, ancestor_type) is not None)
		self._descriptions.append(f"within any {ancestor_type.__name__}")

		return self


	def matching (self, predicate: NodePredicate) -> "Query":

		"""
		Keep matches for which ``predicate(node)`` is true.
		"""

		self._filters.append(predicate)

		return self


	def _matches (self) -> typing.List[tessitura.tree.RenderNode]:

		if self._impossible:
			return []

		own_index = self._context.node.index

		return [
			node for node in self._context.tree.of_type(self._element_type)
			if node.index != own_index and all(f(node) for f in self._filters)
		]


	def _describe (self) -> str:

		conditions = ", ".join(self._descriptions)
		suffix = f" ({conditions})" if conditions else ""

		return f"{self._element_type.__name__}{suffix}"


	def get_all (self) -> typing.List[tessitura.tree.RenderNode]:

		"""
		Return every match, ordered by start time then creation order.
		"""

		return sorted(self._matches(), key=lambda node: (node.span.start, node.index))


	def get (self) -> typing.Optional[tessitura.tree.RenderNode]:

		"""Return the single best match, or None.

		The best match is the one most closely related to the querying node
		(deepest shared ancestor), then the earliest.
		"""

		matches = self._matches()

		if not matches:
			return None

		tree = self._context.tree
		me = self._context.node

		return min(
			matches,
			key=lambda node: (-tree.common_ancestor_depth(me, node), node.span.start, node.index)
		)


	def require (self) -> tessitura.tree.RenderNode:

		"""
		Return the best match or raise ``MissingContext``.
		"""

		found = self.get()

		if found is None:
			raise tessitura.errors.MissingContext(f"Required {self._describe()} not found.")

		return found


	def require_all (self) -> typing.List[tessitura.tree.RenderNode]:

		"""
		Return all matches or raise ``MissingContext`` if there are none.
		"""

		found = self.get_all()

		if not found:
			raise tessitura.errors.MissingContext(f"Required {self._describe()} not found.")

		return found


class RenderContext:

	"""The view of the render tree available to one renderer invocation."""

	def __init__ (self, tree: tessitura.tree.RenderTree, node: tessitura.tree.RenderNode, beat_length: int) -> None:

		self.tree = tree
		self.node = node
		self.beat_length = beat_length


	def find (self, element_type: type) -> Query:

		"""
		Start a query for elements of ``element_type``.
		"""

		return Query(self, element_type)


	def rng (self) -> random.Random:

		"""
		Return a fresh RNG seeded from this node's seed.
		"""

		return random.Random(self.node.seed)


	def rng_with_seed (self, key: typing.Any) -> random.Random:

		"""
		Return a fresh RNG seeded from this node's seed and ``key``.
		"""

		return tessitura.seeding.make_rng(self.node.seed, key)


	def nearest_ancestor (
		self,
		element_type: type,
		node: typing.Optional[tessitura.tree.RenderNode] = None
	) -> typing.Optional[tessitura.tree.RenderNode]:

		"""
		Return the nearest ``element_type`` ancestor of ``node`` (default: the rendering node).
		"""

		return self.tree.nearest_ancestor(node or self.node, element_type)
