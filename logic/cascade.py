"""
Status cascade across the prerequisite graph.

Key concepts:
- Marking a course passed or active requires every prerequisite to be passed.
  The upgrade preview walks prerequisites recursively and lists the ones that
  would have to change.
- Moving a passed course back to active or pending can leave dependents with
  an unsatisfied prerequisite. The downgrade preview walks dependents
  breadth-first and sends every violated dependent back to pending.
- Previews are pure. An empty preview means there is nothing to confirm and
  the change can be applied directly.
- Applying a change returns a new course list; the input is never mutated.
"""

import logging
from collections import deque
from dataclasses import dataclass, field, replace

from logic.course_graph import as_graph
from models.data_models import Course, CourseStatus

logger = logging.getLogger(__name__)


def required_prerequisite_status(target: CourseStatus) -> CourseStatus | None:
    """
    Status every prerequisite must reach before a course can move to target.

    Active needs completed prerequisites too, mirroring enrollment rules.
    Pending needs nothing.
    """
    if target in (CourseStatus.PASSED, CourseStatus.ACTIVE):
        return CourseStatus.PASSED
    return None


# ============================================================================
# Upgrade cascade (towards prerequisites)
# ============================================================================

@dataclass(frozen=True)
class CascadeNode:
    """A prerequisite in the upgrade preview tree."""
    course_id: str
    code: str
    current_status: CourseStatus
    new_status: CourseStatus
    will_change: bool
    children: tuple = field(default_factory=tuple)


def _upgrade_node(course: Course, required: CourseStatus, graph, ancestors: frozenset):
    path = ancestors | {course.id}
    children = []
    for prereq in graph.prerequisites_of(course):
        if prereq.id in path:
            logger.warning(f"Prerequisite cycle through {prereq.id}; not following it again")
            continue
        child = _upgrade_node(prereq, required, graph, path)
        if child is not None:
            children.append(child)

    will_change = not course.status.satisfies(required)
    if not will_change and not children:
        return None
    return CascadeNode(
        course_id=course.id,
        code=course.code,
        current_status=course.status,
        new_status=required if will_change else course.status,
        will_change=will_change,
        children=tuple(children),
    )


def preview_upgrade_cascade(course: Course, target: CourseStatus, courses) -> list:
    """
    Prerequisites that must change before course can move to target.

    Args:
        course: The course whose status is being raised
        target: Requested status
        courses: CourseGraph or list of all courses

    Returns:
        list: CascadeNode trees, one per direct prerequisite that changes or
        has a changing prerequisite below it. Unchanged nodes are kept only
        to show the path to a changing one. Empty when nothing has to change.
    """
    required = required_prerequisite_status(target)
    if required is None:
        return []

    graph = as_graph(courses)
    root_path = frozenset({course.id})
    tree = []
    for prereq in graph.prerequisites_of(course):
        if prereq.id in root_path:
            continue
        node = _upgrade_node(prereq, required, graph, root_path)
        if node is not None:
            tree.append(node)
    return tree


def flatten(tree: list) -> dict:
    """Collect {course_id: new_status} for the nodes that actually change."""
    changes = {}
    stack = list(tree)
    while stack:
        node = stack.pop()
        if node.will_change:
            changes[node.course_id] = node.new_status
        stack.extend(node.children)
    return changes


# ============================================================================
# Downgrade cascade (towards dependents)
# ============================================================================

def preview_downgrade_cascade(course: Course, new_status: CourseStatus, courses) -> dict:
    """
    Dependents that lose a satisfied prerequisite when course regresses.

    Only applies when a passed course moves to something other than passed.
    A dependent is violated if any of its prerequisites is not passed or is
    itself regressing in this cascade; it drops to pending, never to active,
    and its own dependents are checked in turn. Dependents already pending
    are left alone.

    Args:
        course: The course being regressed
        new_status: Its requested status
        courses: CourseGraph or list of all courses

    Returns:
        dict: {course_id: CourseStatus.PENDING} for each dependent to regress
    """
    if course.status != CourseStatus.PASSED or new_status == CourseStatus.PASSED:
        return {}
    return _regress_dependents(as_graph(courses), [course.id])


def _regress_dependents(graph, root_ids: list, pinned: frozenset = frozenset()) -> dict:
    # Breadth-first over dependents of the regressing roots. Pinned courses
    # keep their status and are not walked through.
    affected = set(root_ids)
    processed = set(root_ids) | set(pinned)
    changes = {}
    queue = deque(root_ids)

    while queue:
        current_id = queue.popleft()
        for dependent in graph.dependents_of(current_id):
            if dependent.id in processed:
                continue

            satisfied = all(
                prereq.id not in affected and prereq.status == CourseStatus.PASSED
                for prereq in graph.prerequisites_of(dependent)
            )
            if satisfied:
                continue

            processed.add(dependent.id)
            if dependent.status == CourseStatus.PENDING:
                continue

            changes[dependent.id] = CourseStatus.PENDING
            affected.add(dependent.id)
            queue.append(dependent.id)

    return changes


# ============================================================================
# Applying changes
# ============================================================================

def apply_change(courses: list, course_id: str, new_status: CourseStatus,
                 overrides: dict = None) -> list:
    """
    Set one course's status and apply cascade overrides.

    Overrides may come from anywhere (including stale previews), so:
    - ids that no longer exist are skipped, the rest still apply
    - an override never moves a passed course to active

    Args:
        courses: List of all courses
        course_id: Course the user changed
        new_status: Its new status
        overrides: {course_id: CourseStatus} from the previews

    Returns:
        list: New course list. Unchanged if course_id is unknown.
    """
    ids = {course.id for course in courses}
    if course_id not in ids:
        logger.warning(f"Status change for unknown course {course_id!r} ignored")
        return list(courses)

    overrides = dict(overrides or {})
    overrides.pop(course_id, None)
    for stale_id in set(overrides) - ids:
        logger.debug(f"Override for unknown course {stale_id!r} ignored")

    updated = []
    for course in courses:
        if course.id == course_id:
            course = replace(course, status=new_status)
        elif course.id in overrides:
            status = overrides[course.id]
            if course.status == CourseStatus.PASSED and status == CourseStatus.ACTIVE:
                logger.debug(f"Not moving passed course {course.id} to active")
            elif status != course.status:
                course = replace(course, status=status)
        updated.append(course)
    return updated


@dataclass(frozen=True)
class StatusChangePlan:
    """Preview of a status change, ready to confirm with apply_plan()."""
    course_id: str
    current_status: CourseStatus
    new_status: CourseStatus
    upgrade_tree: tuple
    upgrades: dict
    downgrades: dict

    @property
    def overrides(self) -> dict:
        merged = dict(self.upgrades)
        merged.update(self.downgrades)
        return merged

    @property
    def is_empty(self) -> bool:
        return not self.upgrades and not self.downgrades


def plan_status_change(courses: list, course_id: str, new_status: CourseStatus) -> StatusChangePlan | None:
    """
    Preview both cascades for a requested status change.

    Returns:
        StatusChangePlan, or None if course_id is unknown
    """
    graph = as_graph(courses)
    course = graph.find_by_id(course_id)
    if course is None:
        return None

    tree = preview_upgrade_cascade(course, new_status, graph)
    return StatusChangePlan(
        course_id=course_id,
        current_status=course.status,
        new_status=new_status,
        upgrade_tree=tuple(tree),
        upgrades=flatten(tree),
        downgrades=preview_downgrade_cascade(course, new_status, graph),
    )


def apply_plan(courses: list, plan: StatusChangePlan, include_cascade: bool = True) -> list:
    """
    Apply a confirmed plan.

    With include_cascade=False only the requested course changes, for callers
    whose user declined the cascade.
    """
    overrides = plan.overrides if include_cascade else {}
    return apply_change(courses, plan.course_id, plan.new_status, overrides)


def set_statuses(courses: list, statuses: dict) -> list:
    """
    Set several courses' statuses at once, regressing affected dependents.

    Every passed course that moves away from passed starts a downgrade
    cascade. Courses given an explicit status keep it and the cascade does
    not pass through them. No upgrade cascade is applied.

    Args:
        courses: List of all courses
        statuses: {course_id: CourseStatus}

    Returns:
        list: New course list
    """
    graph = as_graph(courses)
    explicit = {cid: status for cid, status in statuses.items() if cid in graph}
    regressing = [
        cid for cid, status in explicit.items()
        if graph.find_by_id(cid).status == CourseStatus.PASSED and status != CourseStatus.PASSED
    ]

    # Dependents are checked against the statuses after the explicit changes
    after = [replace(c, status=explicit[c.id]) if c.id in explicit else c for c in courses]
    downgrades = _regress_dependents(as_graph(after), regressing, frozenset(explicit))

    updated = []
    for course in after:
        if course.id in downgrades:
            course = replace(course, status=downgrades[course.id])
        updated.append(course)
    return updated
