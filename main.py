from time import sleep, perf_counter

from lazyweave import flatten, memoize, segment, setup_logging, weave
from lazyweave.config import Settings


def expensive_transform(x):
    # Simulate a costly step so laziness is visible
    print(f"  computing f({x}) ...")
    sleep(0.1)
    return x * x


print("\n--- Demo: laziness (no work until iterated) ---")
pipeline = (
    weave(range(1, 10_000))
    .map(expensive_transform)
    .filter(lambda v: v % 2 == 0)
    .skip(3)
    .take(5)
)
print("Constructed pipeline. Nothing computed yet.")
t0 = perf_counter()
out = list(pipeline)
t1 = perf_counter()
print(f"Result: {out}")
print(f"Time: {t1 - t0:.2f}s\n")

print("--- Demo: sliding windows over a one-shot generator ---")
readings = (20 + (i % 7) for i in range(20))
averages = weave(readings).segment(3).map(lambda w: round(sum(w) / 3, 2)).take(6)
print(f"Moving averages: {averages.to_list()}\n")

print("--- Demo: delay pairs each element with a later one ---")
print(weave("abcdef").delay([0, 2]).to_list(), "\n")

print("--- Demo: flatten ---")
print(list(flatten([[1, 2], [[3], [4, 5]], [6]])), "\n")

print("--- Demo: memoization (one source, several cursors) ---")
setup_logging(Settings(log_level="DEBUG"))
first = memoize((expensive_transform(x) for x in range(4)), capacity=2)
second = first.save()
print("First cursor:", list(first))
print("Second cursor (no recomputation):", list(second))
print("Buffer stats:", first.buffer.stats().to_dict())
first.release()
second.release()

print("\n--- Demo: windows chosen from capabilities ---")
for source in ([1, 2, 3, 4], iter([1, 2, 3, 4])):
    windows = segment(2, source)
    print(f"{type(windows).__name__}: {list(windows)}")
