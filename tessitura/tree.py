"""The render tree: an arena of nodes with parent/child indices.

Nodes are appended, never removed or mutated after creation (apart from their
``children`` list growing). A per-type index lets context queries jump
straight to the candidates of one element type without scanning the tree.
"""

import dataclasses
import enum
import typing

import tessitura.seeding
import tessitura.timing


@dataclasses.dataclass(frozen=True)
class Segment:

	"""
	A renderer's output: an element placed over a span, optionally named.

	Named segments derive their seed from the name instead of their position,
	so two segments with the same name under one parent render identically
	(relative to their own start).
	"""

	element: typing.Any
	span: tessitura.timing.Span
	name: typing.Optional[str] = None


@dataclasses.dataclass
class RenderNode:

	"""
	One placed element in the render tree.
	"""

	index: int
	element: typing.Any
	span: tessitura.timing.Span
	parent: typing.Optional[int]
	name: typing.Optional[str]
	seed: int
	depth: int
	children: typing.List[int] = dataclasses.field(default_factory=list)


def path_component (segment: Segment, parent_span: tessitura.timing.Span) -> str:

	"""Return the seed path component for a child segment.

	Unnamed segments are identified by type plus their offset and length
	relative to the parent, so moving a parent moves its children with it.
	"""

	type_name = type(segment.element).__name__

	if segment.name is not None:
		return f"{type_name}#{segment.name}"

	return f"{type_name}@{segment.span.start - parent_span.start}+{segment.span.length}"


def _payload_dict (items: typing.List[typing.Tuple[str, typing.Any]]) -> typing.Dict[str, typing.Any]:

	# Enum members are stored by name so payloads stay plain data.
	return {key: value.name if isinstance(value, enum.Enum) else value for key, value in items}


class RenderTree:

	"""Arena storage for render nodes with a per-type index."""

	def __init__ (self) -> None:

		self.nodes: typing.List[RenderNode] = []
		self._by_type: typing.Dict[type, typing.List[int]] = {}


	def _append (self, node: RenderNode) -> RenderNode:

		self.nodes.append(node)
		self._by_type.setdefault(type(node.element), []).append(node.index)

		if node.parent is not None:
			self.nodes[node.parent].children.append(node.index)

		return node


	def add_root (self, element: typing.Any, span: tessitura.timing.Span, seed: int) -> RenderNode:

		"""
		Create the root node.
		"""

		if self.nodes:
			raise ValueError("The tree already has a root")

		return self._append(RenderNode(
			index = 0,
			element = element,
			span = span,
			parent = None,
			name = None,
			seed = seed,
			depth = 0
		))


	def add_child (self, parent: RenderNode, segment: Segment) -> RenderNode:

		"""
		Attach a rendered segment under ``parent`` and derive its seed.
		"""

		seed = tessitura.seeding.derive_seed(parent.seed, path_component(segment, parent.span))

		return self._append(RenderNode(
			index = len(self.nodes),
			element = segment.element,
			span = segment.span,
			parent = parent.index,
			name = segment.name,
			seed = seed,
			depth = parent.depth + 1
		))


	@property
	def root (self) -> RenderNode:

		if not self.nodes:
			raise ValueError("The tree is empty")

		return self.nodes[0]


	def of_type (self, element_type: type) -> typing.List[RenderNode]:

		"""
		Return all nodes whose element is exactly ``element_type``, in creation order.
		"""

		return [self.nodes[i] for i in self._by_type.get(element_type, [])]


	def ancestors (self, node: RenderNode) -> typing.Iterator[RenderNode]:

		"""
		Yield the node's ancestors, nearest first.
		"""

		current = node.parent

		while current is not None:
			ancestor = self.nodes[current]
			yield ancestor
			current = ancestor.parent


	def nearest_ancestor (self, node: RenderNode, element_type: type) -> typing.Optional[RenderNode]:

		"""
		Return the closest ancestor whose element is ``element_type``, if any.
		"""

		for ancestor in self.ancestors(node):
			if type(ancestor.element) is element_type:
				return ancestor

		return None


	def is_descendant (self, node: RenderNode, ancestor: RenderNode) -> bool:

		"""
		Return True if ``ancestor`` appears on ``node``'s path to the root.
		"""

		return any(a.index == ancestor.index for a in self.ancestors(node))


	def common_ancestor_depth (self, a: RenderNode, b: RenderNode) -> int:

		"""
		Return the depth of the deepest node that is an ancestor-or-self of both.
		"""

		path_a = {a.index} | {n.index for n in self.ancestors(a)}

		for candidate in [b] + list(self.ancestors(b)):
			if candidate.index in path_a:
				return candidate.depth

		return -1


	def to_dict (self, node: typing.Optional[RenderNode] = None) -> typing.Dict[str, typing.Any]:

		"""Return a nested dict of ``{type, start, end, name, payload, children}``.

		Dataclass payloads are flattened with ``dataclasses.asdict`` (enum
		members by name); anything else is stored as ``None``.
		"""

		if node is None:
			node = self.root

		element = node.element

		if dataclasses.is_dataclass(element) and not isinstance(element, type):
			payload: typing.Optional[typing.Dict[str, typing.Any]] = dataclasses.asdict(element, dict_factory=_payload_dict)

		else:
			payload = None

		return {
			"type": type(element).__name__,
			"start": node.span.start,
			"end": node.span.end,
			"name": node.name,
			"payload": payload,
			"children": [self.to_dict(self.nodes[i]) for i in node.children],
		}
