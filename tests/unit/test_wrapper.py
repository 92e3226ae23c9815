"""Unit tests for ServiceWrapper configuration and the process-wide defaults."""

import pytest

import service_wrapper
from service_wrapper.core.config import WrapperOptions
from service_wrapper.core.exceptions import ConfigurationError, InvalidClientError
from service_wrapper.core.types import Hook
from service_wrapper.runtime.queue import AdmissionQueue, get_admission_queue
from service_wrapper.runtime.wrapper import (
    ServiceWrapper,
    get_service_wrapper,
    init,
    reset_service_wrapper,
)


async def client(*args):
    return args


class TestInit:

    def test_defaults(self):
        wrapper = ServiceWrapper()
        assert wrapper.client is None
        assert wrapper.queue is None
        assert wrapper.default_parallel_status is False

    def test_returns_self_for_chaining(self, wrapper):
        assert wrapper.init(client=client) is wrapper

    def test_rejects_non_mapping(self, wrapper):
        with pytest.raises(ConfigurationError):
            wrapper.init(["client"])
        with pytest.raises(ConfigurationError):
            wrapper.init("queue")

    def test_rejects_non_callable_client(self, wrapper):
        with pytest.raises(InvalidClientError):
            wrapper.init(client="https://example.com")
        with pytest.raises(InvalidClientError):
            wrapper.set_client(42)

    def test_rejects_bad_option_values(self, wrapper):
        with pytest.raises(ConfigurationError):
            wrapper.init(queue="sometimes")

    def test_queue_enabled(self, wrapper, queue):
        wrapper.init({"client": client, "queue": True})
        assert wrapper.queue is queue
        assert queue.trace is False

    def test_camel_case_aliases(self, wrapper, queue):
        wrapper.init({"queue": True, "queueLogs": True, "defaultParallelStatus": True})
        assert queue.trace is True
        assert wrapper.default_parallel_status is True

    def test_snake_case_keywords(self, wrapper, queue):
        wrapper.init(queue=True, queue_logs=True, default_parallel_status=True)
        assert queue.trace is True
        assert wrapper.default_parallel_status is True

    def test_options_model(self, wrapper):
        wrapper.init(WrapperOptions(client=client, queue=True))
        assert wrapper.client is client
        assert wrapper.queue is not None

    def test_queue_disabled_detaches(self, wrapper):
        wrapper.init(queue=True)
        wrapper.init(queue=False)
        assert wrapper.queue is None

    def test_missing_client_keeps_previous(self, wrapper):
        wrapper.init(client=client)
        wrapper.init(queue=True)
        assert wrapper.client is client

    def test_default_parallel_unchanged_when_omitted(self, wrapper):
        wrapper.init(default_parallel_status=True)
        wrapper.init(queue=True)
        assert wrapper.default_parallel_status is True

    def test_private_queue_provider(self):
        wrapper = ServiceWrapper(queue_provider=AdmissionQueue).init(queue=True)
        assert wrapper.queue is not get_admission_queue()


class TestGlobalHooks:

    def test_default_hooks_installed(self):
        hooks = ServiceWrapper().hooks
        assert Hook.UPDATE_CONFIG in hooks
        assert Hook.BEFORE_RESOLVE in hooks
        assert Hook.BEFORE_REJECT in hooks
        assert Hook.BEFORE_FIRE not in hooks
        assert len(hooks) == 3

    @pytest.mark.asyncio
    async def test_defaults_pass_values_through(self):
        wrapper = ServiceWrapper()
        assert await wrapper.exec_hook(Hook.BEFORE_RESOLVE, "res", None) == "res"
        assert await wrapper.exec_hook(Hook.BEFORE_REJECT, "err", None) == "err"
        assert await wrapper.exec_hook(Hook.UPDATE_CONFIG, "a", "b") == ("a", "b")
        assert await wrapper.exec_hook(Hook.AFTER_FAIL, "err", None) is None

    @pytest.mark.asyncio
    async def test_last_write_wins(self):
        wrapper = ServiceWrapper()
        wrapper.set_hook(Hook.BEFORE_RESOLVE, lambda res, opts: 1)
        wrapper.set_hook("before.resolve", lambda res, opts: 2)
        assert await wrapper.exec_hook(Hook.BEFORE_RESOLVE, None, None) == 2

    @pytest.mark.asyncio
    async def test_default_validation_accepts_everything(self):
        wrapper = ServiceWrapper()
        assert await wrapper.resolve_validation(None) is True
        wrapper.set_resolve_validation(lambda res: res == "ok")
        assert await wrapper.resolve_validation("ok") is True
        assert await wrapper.resolve_validation("nope") is False

    def test_rejects_non_callable_validation(self):
        with pytest.raises(ConfigurationError):
            ServiceWrapper().set_resolve_validation("ok")


class TestQueuePassthroughs:

    def test_no_queue(self, wrapper):
        assert wrapper.add_to_queue("x") is None
        assert wrapper.check_queue_status("x") is None
        assert wrapper.remove_from_queue("x") is False
        assert wrapper.cancel_service("x") is False

    @pytest.mark.asyncio
    async def test_with_queue(self, wrapper, queue):
        wrapper.init(queue=True)
        entry_id = wrapper.add_to_queue("x")
        waiter = wrapper.check_queue_status(entry_id)
        assert waiter.done()
        assert wrapper.cancel_service(entry_id) is False
        assert wrapper.remove_from_queue(entry_id) is True
        assert queue.is_empty


class TestProcessDefaults:

    def test_module_init_configures_shared_wrapper(self):
        wrapper = init(client=client, queue=True)
        assert wrapper is get_service_wrapper()
        assert wrapper.queue is get_admission_queue()

    def test_reset(self):
        first = get_service_wrapper()
        reset_service_wrapper()
        assert get_service_wrapper() is not first

    def test_package_exports(self):
        assert service_wrapper.HOOKS is Hook
        assert service_wrapper.init is init
        assert ServiceWrapper.HOOKS.BEFORE_FIRE == "before.fire"
