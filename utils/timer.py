from time import perf_counter


class Timer:
    def __init__(self):
        self.start_time = None
        self.end_time = None

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.stop()

    def start(self):
        self.start_time = perf_counter()
        self.end_time = None

    def stop(self):
        self.end_time = perf_counter()

    @property
    def elapsed(self) -> float:
        if self.start_time is None or self.end_time is None:
            raise ValueError("Timer has not been started and stopped properly.")
        return self.end_time - self.start_time

    @property
    def elapsed_ms(self) -> float:
        return round(self.elapsed * 1000, 2)
