"""
Waiting on property changes of a managed object, mostly tasks.

wait_for_condition() creates one property filter on the object, long-polls
WaitForUpdatesEx until one of the watched properties reaches an expected
value, and destroys the filter before returning or raising.
"""

import http.client
import logging
import socket
import threading
import time

from pyVmomi import vim, vmodl

from vsphere_uuids.exceptions import TaskFailure, WaitCancelled
from vsphere_uuids.properties import create_property_filter_spec, moref_string

logger = logging.getLogger(__name__)

ObjectUpdateKind = vmodl.query.PropertyCollector.ObjectUpdate.Kind
ChangeOperation = vmodl.query.PropertyCollector.Change.Op

APPLIED_KINDS = (ObjectUpdateKind.enter, ObjectUpdateKind.modify, ObjectUpdateKind.leave)
REMOVE_OPERATIONS = (ChangeOperation.remove, ChangeOperation.indirectRemove)

# value stored for a property whose change set removed it
REMOVED = ""

TRANSIENT_ERRORS = (
    vmodl.fault.HostCommunication,
    vmodl.fault.SystemError,
    ConnectionError,
    socket.timeout,
    http.client.HTTPException,
)


class WaitOptions(object):
    """Long-poll options passed to WaitForUpdatesEx."""

    def __init__(self, max_wait_seconds=None, max_object_updates=None):
        self.max_wait_seconds = max_wait_seconds
        self.max_object_updates = max_object_updates

    @classmethod
    def from_config(cls, vc_info):
        return cls(max_wait_seconds=vc_info.max_wait_seconds)

    def to_vmodl(self):
        return vmodl.query.PropertyCollector.WaitOptions(
            maxWaitSeconds=self.max_wait_seconds,
            maxObjectUpdates=self.max_object_updates)


class CancellationToken(object):
    """Set from any thread; checked before every blocking poll."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self):
        self._event.set()

    @property
    def cancelled(self):
        return self._event.is_set()

    def raise_if_cancelled(self):
        if self._event.is_set():
            raise WaitCancelled("Wait for property updates was cancelled")


class RetryPolicy(object):
    """
    Bounded retry with exponential backoff for transient poll failures.

    ``attempts`` counts retries after the first call; 0 means fail fast.
    """

    def __init__(self, attempts=0, backoff=1.0, max_backoff=30.0, sleep=time.sleep):
        if attempts < 0:
            raise ValueError("attempts must not be negative: %r" % (attempts,))
        if backoff < 0:
            raise ValueError("backoff must not be negative: %r" % (backoff,))
        self.attempts = attempts
        self.backoff = backoff
        self.max_backoff = max_backoff
        self.sleep = sleep

    @classmethod
    def from_config(cls, vc_info):
        return cls(attempts=vc_info.poll_retries, backoff=vc_info.retry_backoff)

    def call(self, func, *args, **kwargs):
        delay = self.backoff
        for attempt in range(self.attempts + 1):
            try:
                return func(*args, **kwargs)
            except TRANSIENT_ERRORS as error:
                if attempt == self.attempts:
                    raise
                logger.warning("Transient error while polling (%s), retry %d of %d in %.1fs",
                               error, attempt + 1, self.attempts, delay)
                self.sleep(delay)
                delay = min(delay * 2, self.max_backoff)


NO_RETRY = RetryPolicy()


def _matches(prop, name):
    return name == prop or name.startswith(prop + ".")


def _update_values(props, vals, change):
    for i, prop in enumerate(props):
        if _matches(prop, change.name):
            if change.op in REMOVE_OPERATIONS:
                vals[i] = REMOVED
            else:
                vals[i] = change.val


def _apply_update_set(update_set, end_wait_props, end_vals, filter_props, filter_vals):
    for filter_update in update_set.filterSet:
        for object_update in filter_update.objectSet or []:
            if object_update.kind not in APPLIED_KINDS:
                continue
            for change in object_update.changeSet or []:
                _update_values(end_wait_props, end_vals, change)
                _update_values(filter_props, filter_vals, change)


def _reached(end_vals, expected_vals):
    return any(value == expected
               for value, expected_list in zip(end_vals, expected_vals)
               for expected in expected_list)


def wait_for_condition(session, obj_ref, filter_props, end_wait_props, expected_vals,
                       wait_options=None, cancel_token=None, retry=None):
    """
    Wait until a property of ``obj_ref`` takes one of the expected values.

    :param obj_ref: managed object to watch, e.g. a vim.Task
    :param filter_props: property paths whose final values are returned
    :param end_wait_props: property paths that end the wait
    :param expected_vals: for each of ``end_wait_props``, the values that end
        the wait. Any value of any property is enough.
    :param wait_options: WaitOptions for each long poll
    :param cancel_token: CancellationToken checked before each poll
    :param retry: RetryPolicy for transient errors of the poll call
    :return: list of the ``filter_props`` values, in the same order
    """
    if len(expected_vals) != len(end_wait_props):
        raise ValueError("expected_vals needs one list per property in end_wait_props")

    retry = retry or NO_RETRY
    options = (wait_options or WaitOptions()).to_vmodl()
    collector = session.property_collector

    end_vals = [None] * len(end_wait_props)
    filter_vals = [None] * len(filter_props)

    watched = list(filter_props) + [p for p in end_wait_props if p not in filter_props]
    spec = create_property_filter_spec(obj_ref, watched)
    property_filter = collector.CreateFilter(spec, True)
    logger.debug("Watching %s on %s", watched, moref_string(obj_ref))

    try:
        version = ""
        reached = False
        while not reached:
            if cancel_token is not None:
                cancel_token.raise_if_cancelled()

            update_set = retry.call(collector.WaitForUpdatesEx, version, options)
            if update_set is None or not update_set.filterSet:
                continue

            version = update_set.version
            _apply_update_set(update_set, end_wait_props, end_vals,
                              filter_props, filter_vals)
            reached = _reached(end_vals, expected_vals)
    except BaseException:
        try:
            property_filter.Destroy()
        except Exception as error:
            logger.warning("Could not destroy the property filter on %s: %s",
                           moref_string(obj_ref), error)
        raise
    property_filter.Destroy()

    return filter_vals


def task_error_message(fault):
    return getattr(fault, 'localizedMessage', None) or getattr(fault, 'msg', None) or str(fault)


def get_task_result_after_done(session, task, wait_options=None, cancel_token=None, retry=None):
    """
    Wait for ``task`` to finish; True if it succeeded.

    Raises TaskFailure with the server's message when the task failed.
    """
    state, error = wait_for_condition(
        session, task,
        ["info.state", "info.error"],
        ["info.state"],
        [[vim.TaskInfo.State.success, vim.TaskInfo.State.error]],
        wait_options=wait_options, cancel_token=cancel_token, retry=retry)

    if error is not None and not (isinstance(error, str) and error == REMOVED):
        raise TaskFailure(task_error_message(error), error)

    return state == vim.TaskInfo.State.success
