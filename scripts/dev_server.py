"""
开发模式：监控 signage/ 与 config/ 的变更，自动重启布局编辑后端。
用法: python scripts/dev_server.py [port]
"""

import os
import signal
import subprocess
import sys
import time

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

WATCH_DIRS = [
    os.path.join(PROJECT_ROOT, "signage"),
    os.path.join(PROJECT_ROOT, "config"),
]
WATCH_FILES = {os.path.join(PROJECT_ROOT, "main.py")}
WATCH_EXTENSIONS = {".py", ".yaml", ".yml"}

# 重启冷却时间（秒）
COOLDOWN = 1.5


class Backend:
    """后端子进程。"""

    def __init__(self, port: int):
        self.port = port
        self.process: subprocess.Popen | None = None

    def start(self):
        env = os.environ.copy()
        env["PYTHONPATH"] = PROJECT_ROOT
        env.setdefault("SIGNAGE_BOARD_ROOT", PROJECT_ROOT)
        self.process = subprocess.Popen([sys.executable, "main.py", str(self.port)], cwd=PROJECT_ROOT, env=env)
        print(f"✅ 后端已启动 (PID: {self.process.pid}, port={self.port})")

    def stop(self):
        if self.process is None or self.process.poll() is not None:
            return
        self.process.send_signal(signal.SIGTERM)
        try:
            self.process.wait(timeout=5)
        except subprocess.TimeoutExpired:
            print("⚠️  强制终止...")
            self.process.kill()
            self.process.wait()

    def restart(self):
        self.stop()
        self.start()


class ReloadHandler(FileSystemEventHandler):
    def __init__(self, backend: Backend):
        self.backend = backend
        self._last_trigger = 0.0

    def _relevant(self, path: str) -> bool:
        if "__pycache__" in path:
            return False
        if os.path.dirname(path) == PROJECT_ROOT:
            return path in WATCH_FILES
        return os.path.splitext(path)[1] in WATCH_EXTENSIONS

    def on_any_event(self, event: FileSystemEvent):
        if event.is_directory or event.event_type not in ("modified", "created", "moved"):
            return
        path = getattr(event, "dest_path", "") or event.src_path
        if not self._relevant(path):
            return

        now = time.time()
        if now - self._last_trigger < COOLDOWN:
            return
        self._last_trigger = now

        print(f"\n🔄 检测到变更: {os.path.relpath(path, PROJECT_ROOT)}")
        self.backend.restart()


def main():
    port = int(sys.argv[1]) if len(sys.argv) > 1 else 8400

    backend = Backend(port)
    backend.start()

    handler = ReloadHandler(backend)
    observer = Observer()
    for watch_dir in WATCH_DIRS:
        if os.path.isdir(watch_dir):
            observer.schedule(handler, watch_dir, recursive=True)
    observer.schedule(handler, PROJECT_ROOT, recursive=False)
    observer.start()
    print("🔥 开发模式已启动，按 Ctrl+C 退出")

    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        observer.stop()
        backend.stop()
    observer.join()


if __name__ == "__main__":
    main()
