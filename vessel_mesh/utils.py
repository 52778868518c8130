import time
from contextlib import contextmanager


@contextmanager
def timed_stage(name: str, enabled: bool = True):
    """
    Context manager to print a simple progress message and timing
    for a pipeline stage. Silent when ``enabled`` is False.
    """
    if not enabled:
        yield
        return
    print(f"[{name}] started...")
    t0 = time.time()
    try:
        yield
    finally:
        dt = time.time() - t0
        print(f"[{name}] finished in {dt:.2f} s")
