# server.py — Authoritative arena server: fixed-step simulation of players,
# bullets and constructs, newline-JSON over TCP, snapshots broadcast to every client.
import asyncio, time, argparse, signal
from typing import Dict, Any, Optional

from common.net import read_json, send_json
from engine import config
from arena.combat import HitEvent
from arena.intents import IntentError, JoinIntent, LeaveIntent, parse_intent
from arena.world import World

# ---------- Utility ----------
def now() -> float:
    return time.monotonic()

# ---------- Server ----------
class ArenaServer:
    def __init__(self, cfg: Dict[str, Any], world: Optional[World] = None):
        self.cfg = cfg
        self.world = world if world is not None else World(cfg)
        self.world.broadcast = self._on_snapshot
        self.world.events.subscribe("kill", self._on_kill)

        # networking
        self.clients: Dict[str, asyncio.StreamWriter] = {}
        self.next_conn = 1
        self.max_players = int(config.lookup(cfg, "server.max_players", 16))
        self.latest_snapshot: Optional[Dict[str, Any]] = None

    # ---------- Simulation hooks ----------
    def _on_snapshot(self, snapshot: Dict[str, Any]) -> None:
        # Buffered; the broadcast task ships it so the tick never waits on sockets.
        self.latest_snapshot = snapshot

    def _on_kill(self, event: HitEvent) -> None:
        print(f"[kill] {event.source} -> {event.target_id}")

    # ---------- Players ----------
    def add_client(self, name: str, writer: asyncio.StreamWriter) -> str:
        pid = f"c{self.next_conn}"
        self.next_conn += 1
        self.clients[pid] = writer
        self.world.submit(JoinIntent(pid=pid, name=name))
        print(f"[join] pid={pid} name={name}")
        return pid

    def remove_client(self, pid: str) -> None:
        if self.clients.pop(pid, None) is not None:
            self.world.submit(LeaveIntent(pid=pid))
            print(f"[leave] pid={pid}")

    def handle_message(self, pid: str, msg: Dict[str, Any]) -> None:
        try:
            self.world.submit(parse_intent(pid, msg))
        except IntentError as e:
            print(f"[client] pid={pid} rejected message: {e}")

    # ---------- Networking ----------
    async def handle_client(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter):
        addr = writer.get_extra_info("peername")
        try:
            hello = await read_json(reader)
        except ValueError:
            hello = {}
        if hello.get("type") != "hello":
            writer.close()
            await writer.wait_closed()
            return
        if len(self.clients) >= self.max_players:
            await send_json(writer, {"type": "full"})
            writer.close()
            await writer.wait_closed()
            return

        name = str(hello.get("name", "Player"))[:32]
        pid = self.add_client(name, writer)
        lo, hi = self.world.bounds

        try:
            await send_json(writer, {"type": "welcome", "pid": pid, "world": {"min": lo, "max": hi}})
            while True:
                msg = await read_json(reader)
                if not msg:
                    break
                self.handle_message(pid, msg)
        except Exception as e:
            print(f"[client] {addr} error: {e}")
        finally:
            self.remove_client(pid)
            try:
                writer.close()
                await writer.wait_closed()
            except Exception:
                pass

    async def broadcast_once(self) -> None:
        s = self.latest_snapshot
        if s is None:
            return
        dead = []
        for pid, w in list(self.clients.items()):
            try:
                await send_json(w, s)
            except Exception:
                dead.append(pid)
        for pid in dead:
            self.remove_client(pid)

    async def _broadcast_loop(self):
        snap_dt = 1.0 / float(config.lookup(self.cfg, "server.snapshot_hz", 30))
        while True:
            await self.broadcast_once()
            await asyncio.sleep(snap_dt)

    # ---------- Main game loop ----------
    async def run(self):
        tick_dt = 1.0 / float(config.lookup(self.cfg, "server.tick_hz", 60))
        last = now()
        while True:
            t0 = now()
            # Real elapsed time keeps motion rate-independent when ticks run late.
            self.world.tick((t0 - last) * 1000.0)
            last = t0

            # Tick pacing
            await asyncio.sleep(max(0, tick_dt - (now() - t0)))

# ---------- Entrypoint ----------
async def main_async(args):
    cfg = config.load(args.config)
    if args.port is not None:
        cfg.setdefault("server", {})["port"] = args.port
    host = args.host or config.lookup(cfg, "server.host", "0.0.0.0")
    port = int(config.lookup(cfg, "server.port", 5050))
    server = ArenaServer(cfg)

    srv = await asyncio.start_server(server.handle_client, host, port)
    print(f"[tcp] listening on {host}:{port}")

    loop = asyncio.get_running_loop()
    stop = asyncio.Event()
    for sig in (getattr(signal, "SIGINT", None), getattr(signal, "SIGTERM", None)):
        if sig is not None:
            try:
                loop.add_signal_handler(sig, stop.set)
            except NotImplementedError:
                pass  # e.g., Windows

    bcast_task = asyncio.create_task(server._broadcast_loop(), name="broadcast")
    run_task   = asyncio.create_task(server.run(), name="game_loop")

    def _report_done(t: asyncio.Task):
        if t.cancelled():
            return
        exc = t.exception()
        if exc:
            print(f"[task:{t.get_name()}] crashed: {exc!r}")
            stop.set()
    for t in (bcast_task, run_task):
        t.add_done_callback(_report_done)

    async with srv:
        tcp_task = asyncio.create_task(srv.serve_forever(), name="tcp_server")
        try:
            await stop.wait()          # run until a signal or a task fails
        finally:
            tcp_task.cancel()
            for t in (bcast_task, run_task):
                t.cancel()
            await asyncio.gather(tcp_task, bcast_task, run_task, return_exceptions=True)


def main():
    ap = argparse.ArgumentParser(description="Authoritative arena game server")
    ap.add_argument("--config", default=str(config.DEFAULT_CONFIG_PATH))
    ap.add_argument("--host", default=None)
    ap.add_argument("--port", type=int, default=None)
    args = ap.parse_args()
    try:
        asyncio.run(main_async(args))
    except KeyboardInterrupt:
        pass

if __name__ == "__main__":
    main()
