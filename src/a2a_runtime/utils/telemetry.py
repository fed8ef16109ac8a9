"""OpenTelemetry tracing decorators for the A2A runtime.

`trace_function` wraps a single callable in a span; `trace_class` applies it
to the public methods of a class. Plain functions, coroutine functions and
async generator functions are all supported. For async generators the span
stays open until the generator is exhausted or closed, so a streaming call is
traced over its whole lifetime rather than only until the first ``yield``.

Usage:
    ```python
    @trace_function(span_name='tasks.send', kind=SpanKind.SERVER)
    async def send(params): ...


    @trace_class(exclude_list=['close'])
    class TaskService: ...
    ```

Only ``opentelemetry-api`` is required. Without a configured SDK the tracer
is a no-op.
"""

import contextlib
import functools
import inspect
import logging

from opentelemetry import trace
from opentelemetry.trace import SpanKind as _SpanKind
from opentelemetry.trace import StatusCode


SpanKind = _SpanKind
__all__ = ['SpanKind', 'trace_class', 'trace_function']
INSTRUMENTING_MODULE_NAME = 'a2a-runtime'
INSTRUMENTING_MODULE_VERSION = '0.1.0'

logger = logging.getLogger(__name__)


class _CallOutcome:
    """Result or exception of a traced call, handed to the extractor."""

    __slots__ = ('exception', 'result')

    def __init__(self):
        self.result = None
        self.exception = None


@contextlib.contextmanager
def _traced_span(name, kind, attributes, attribute_extractor, args, kwargs):
    tracer = trace.get_tracer(
        INSTRUMENTING_MODULE_NAME, INSTRUMENTING_MODULE_VERSION
    )
    with tracer.start_as_current_span(name, kind=kind) as span:
        for key, value in (attributes or {}).items():
            span.set_attribute(key, value)

        outcome = _CallOutcome()
        try:
            yield outcome
            span.set_status(StatusCode.OK)
        except Exception as e:
            outcome.exception = e
            span.record_exception(e)
            span.set_status(StatusCode.ERROR, description=str(e))
            raise
        finally:
            if attribute_extractor:
                try:
                    attribute_extractor(
                        span, args, kwargs, outcome.result, outcome.exception
                    )
                except Exception as attr_e:
                    logger.error(
                        f'attribute_extractor error in span {name}: {attr_e}'
                    )


def trace_function(
    func=None,
    *,
    span_name=None,
    kind=SpanKind.INTERNAL,
    attributes=None,
    attribute_extractor=None,
):
    """Traces each call of the decorated function in its own span.

    Usable bare (``@trace_function``) or with arguments.

    Args:
        func: The function to wrap. None when used with arguments.
        span_name: Span name. Defaults to ``'<module>.<function name>'``.
        kind: The ``SpanKind`` of the created spans.
        attributes: Static attributes set on every span.
        attribute_extractor: Optional callback
            ``(span, args, kwargs, result, exception)`` invoked when the call
            finishes. Errors it raises are logged and otherwise ignored.

    Returns:
        The wrapped function, or a decorator when ``func`` is None.
    """
    if func is None:
        return functools.partial(
            trace_function,
            span_name=span_name,
            kind=kind,
            attributes=attributes,
            attribute_extractor=attribute_extractor,
        )

    name = span_name or f'{func.__module__}.{func.__name__}'

    if inspect.isasyncgenfunction(func):

        @functools.wraps(func)
        async def async_gen_wrapper(*args, **kwargs):
            with _traced_span(
                name, kind, attributes, attribute_extractor, args, kwargs
            ):
                async with contextlib.aclosing(func(*args, **kwargs)) as agen:
                    async for item in agen:
                        yield item

        return async_gen_wrapper

    if inspect.iscoroutinefunction(func):

        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs):
            with _traced_span(
                name, kind, attributes, attribute_extractor, args, kwargs
            ) as outcome:
                outcome.result = await func(*args, **kwargs)
                return outcome.result

        return async_wrapper

    @functools.wraps(func)
    def sync_wrapper(*args, **kwargs):
        with _traced_span(
            name, kind, attributes, attribute_extractor, args, kwargs
        ) as outcome:
            outcome.result = func(*args, **kwargs)
            return outcome.result

    return sync_wrapper


def trace_class(
    include_list: list[str] | None = None,
    exclude_list: list[str] | None = None,
    kind=SpanKind.INTERNAL,
):
    """Class decorator applying `trace_function` to the class's methods.

    Dunder methods are never traced. When ``include_list`` is given only those
    methods are traced, otherwise every method not in ``exclude_list`` is.
    Span names take the form ``'<module>.<class>.<method>'``.
    """
    exclude_list = exclude_list or []

    def decorator(cls):
        for name, method in inspect.getmembers(cls, inspect.isfunction):
            if name.startswith('__') and name.endswith('__'):
                continue
            if include_list and name not in include_list:
                continue
            if not include_list and name in exclude_list:
                continue

            span_name = f'{cls.__module__}.{cls.__name__}.{name}'
            setattr(
                cls,
                name,
                trace_function(span_name=span_name, kind=kind)(method),
            )
        return cls

    return decorator
