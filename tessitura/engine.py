"""Render engine: explicit renderer registration and fixed-point resolution.

Renderers are registered per element type. Composing walks the tree breadth
first: each rendered segment becomes a node, and every renderer registered
for the node's type becomes a task. A task that raises
:class:`~tessitura.errors.MissingContext` is deferred to the next pass. Passes
repeat until nothing is pending, a pass makes no progress, or ``max_passes``
is reached; whatever is still pending is reported as a
:class:`RenderFailure` rather than raised.
"""

import collections
import dataclasses
import json
import logging
import typing

import tessitura.constants.pulses
import tessitura.context
import tessitura.errors
import tessitura.timing
import tessitura.tree


logger = logging.getLogger(__name__)


Renderer = typing.Callable[
	[typing.Any, tessitura.timing.Span, tessitura.context.RenderContext],
	typing.List[tessitura.tree.Segment]
]

DEFAULT_MAX_PASSES = 16


@dataclasses.dataclass(frozen=True)
class RenderFailure:

	"""
	A render task that was still missing context when the pass limit was hit.
	"""

	element_type: str
	span: tessitura.timing.Span
	reason: str


@dataclasses.dataclass
class Composition:

	"""
	A fully resolved render tree plus any subtrees that could not be resolved.
	"""

	tree: tessitura.tree.RenderTree
	seed: int
	failures: typing.List[RenderFailure] = dataclasses.field(default_factory=list)
	passes: int = 0

	@property
	def root (self) -> tessitura.tree.RenderNode:
		return self.tree.root

	def elements (self, element_type: type) -> typing.List[tessitura.tree.RenderNode]:

		"""Return all nodes of ``element_type`` ordered by start then creation."""

		return sorted(self.tree.of_type(element_type), key=lambda node: (node.span.start, node.index))

	def to_dict (self) -> typing.Dict[str, typing.Any]:

		"""Return the persisted form of the tree."""

		return self.tree.to_dict()

	def save_json (self, filename: str) -> None:

		"""Write the persisted form of the tree to a JSON file."""

		with open(filename, "w") as f:
			json.dump(self.to_dict(), f, indent=2)

		logger.info(f"Saved composition tree to {filename}")


class RenderEngine:

	"""Holds the renderer registrations and composes trees from them."""

	def __init__ (
		self,
		beat_length: int = tessitura.constants.pulses.MIDI_QUARTER_NOTE,
		max_passes: int = DEFAULT_MAX_PASSES
	) -> None:

		if max_passes < 1:
			raise ValueError("max_passes must be at least 1")

		self.beat_length = beat_length
		self.max_passes = max_passes
		self._renderers: typing.Dict[type, typing.List[Renderer]] = {}


	def register (self, element_type: type, renderer: Renderer) -> None:

		"""
		Register a renderer for an element type. Several may share one type.
		"""

		self._renderers.setdefault(element_type, []).append(renderer)


	def register_all (self, registrations: typing.Iterable[typing.Tuple[type, Renderer]]) -> None:

		"""
		Register a list of ``(element_type, renderer)`` pairs in order.
		"""

		for element_type, renderer in registrations:
			self.register(element_type, renderer)


	def renderers_for (self, element_type: type) -> typing.List[Renderer]:

		"""
		Return the renderers registered for ``element_type`` (possibly empty).
		"""

		return list(self._renderers.get(element_type, []))


	def compose (self, element: typing.Any, span: tessitura.timing.Span, seed: int) -> Composition:

		"""Render ``element`` over ``span`` until the tree stops growing.

		Parameters:
			element: The root element.
			span: The root's span in pulses.
			seed: Root seed; every node's RNG derives from it.

		Returns:
			The resolved :class:`Composition`. Unresolved tasks are listed in
			``composition.failures``.
		"""

		tree = tessitura.tree.RenderTree()
		root = tree.add_root(element, span, seed)

		pending: typing.List[typing.Tuple[int, int]] = self._tasks_for(root)
		reasons: typing.Dict[typing.Tuple[int, int], str] = {}
		passes = 0

		while pending and passes < self.max_passes:

			passes += 1
			queue = collections.deque(pending)
			pending = []
			resolved = 0

			while queue:

				task = queue.popleft()
				node_index, renderer_index = task
				node = tree.nodes[node_index]
				renderer = self._renderers[type(node.element)][renderer_index]
				context = tessitura.context.RenderContext(tree, node, self.beat_length)

				try:
					segments = renderer(node.element, node.span, context)

				except tessitura.errors.MissingContext as exc:
					pending.append(task)
					reasons[task] = exc.reason
					continue

				resolved += 1
				reasons.pop(task, None)

				for segment in segments:
					child = tree.add_child(node, segment)
					queue.extend(self._tasks_for(child))

			logger.debug(f"Pass {passes}: {resolved} rendered, {len(pending)} deferred, {len(tree.nodes)} nodes")

			if resolved == 0:
				break

		failures: typing.List[RenderFailure] = []

		for task in pending:
			node = tree.nodes[task[0]]
			failure = RenderFailure(type(node.element).__name__, node.span, reasons.get(task, "unresolved"))
			failures.append(failure)
			logger.warning(f"Unresolved {failure.element_type} at {failure.span.start}-{failure.span.end}: {failure.reason}")

		logger.info(f"Composed {len(tree.nodes)} nodes in {passes} passes ({len(failures)} unresolved)")

		return Composition(tree=tree, seed=seed, failures=failures, passes=passes)


	def _tasks_for (self, node: tessitura.tree.RenderNode) -> typing.List[typing.Tuple[int, int]]:

		return [(node.index, i) for i in range(len(self._renderers.get(type(node.element), [])))]
