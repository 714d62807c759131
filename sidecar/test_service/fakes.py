"""
Test doubles for the sidecar service layer.
"""


class FakeRunner:
    """CommandRunner stand-in that records calls instead of touching processes"""

    def __init__(self, outputs=None, which_map=None, kill_result=False, spawn_error=None):
        self.outputs = outputs or {}
        self.which_map = which_map or {}
        self.kill_result = kill_result
        self.spawn_error = spawn_error
        self.calls = []
        self.spawned = []
        self.killed = []
        self.events = []

    def run(self, argv, timeout=10, merge_stderr=True):
        self.calls.append(list(argv))
        self.events.append(('run', list(argv)))
        return self.outputs.get(tuple(argv), ('', 1))

    def spawn_detached(self, argv, log_path):
        self.spawned.append((list(argv), log_path))
        self.events.append(('spawn', list(argv)))
        if self.spawn_error:
            raise self.spawn_error

    def kill_by_path(self, path):
        self.killed.append(path)
        self.events.append(('kill', path))
        return self.kill_result

    def which(self, name):
        self.events.append(('which', name))
        return self.which_map.get(name)
