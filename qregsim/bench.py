# qregsim/bench.py
import argparse, csv, os, socket, subprocess, time, platform
from datetime import datetime
import numpy as np
from .config import SimulatorConfig
from .logging import get_logger, set_log_level
from .session import SimulationSession

logger = get_logger(__name__)

DATA_DIR = os.path.join(os.path.dirname(__file__), "..", "data")

def backend_dir(backend):
    path = os.path.join(DATA_DIR, backend)
    os.makedirs(path, exist_ok=True)
    return path

# ---------------------------------------------------------------------

def meta_row():
    commit = ""
    try:
        commit = subprocess.check_output(["git", "rev-parse", "--short", "HEAD"],
                                         stderr=subprocess.DEVNULL).decode().strip()
    except (OSError, subprocess.CalledProcessError):
        pass
    return {
        "hostname": socket.gethostname(),
        "commit": commit,
        "dtype": "complex128",
        "timestamp": datetime.now().isoformat(timespec="seconds"),
    }

HEADER = ["qubits","depth","backend","threads","gates","wall_ms","hostname","commit","dtype","timestamp"]

def new_csv(path):
    """Create/overwrite CSV with header."""
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "w", newline="") as f:
        csv.DictWriter(f, fieldnames=HEADER).writeheader()

def write_row(path, row):
    with open(path, "a", newline="") as f:
        csv.DictWriter(f, fieldnames=HEADER).writerow(row)

# ---------------------------------------------------------------------

def random_ops(n, depth, seed=0):
    """Alternating layers: H/X on every qubit, then CNOTs on neighbouring pairs."""
    rng = np.random.default_rng(seed)
    ops = []
    for layer in range(depth):
        if layer % 2 == 0:
            for k in range(n):
                ops.append(("H" if rng.integers(0, 2) == 0 else "X", k))
        elif n > 1:
            for k in range(0, n-1, 2):
                if rng.integers(0, 2) == 0:
                    ops.append(("CNOT", (k, k+1)))
                else:
                    ops.append(("CNOT", (k+1, k)))
    return ops

def run_ops(n, ops, backend, threads=None) -> SimulationSession:
    s = SimulationSession(n, SimulatorConfig(backend=backend, num_threads=threads, debug=False))
    for tag, qubits in ops:
        s.apply_gate(tag, qubits)
    return s

def time_run(n, ops, backend, threads=None):
    t0 = time.perf_counter()
    run_ops(n, ops, backend, threads)
    return (time.perf_counter() - t0) * 1e3  # ms

def warmup(n, ops, backend, threads=None):
    # one dummy run to JIT-compile & warm caches
    run_ops(n, ops[:4], backend, threads)

def pool_threads():
    from .apply_numba import max_threads
    return max_threads()

def _row(n, depth, backend, threads, gates, wall):
    m = meta_row()
    return {
        "qubits": n, "depth": depth, "backend": backend, "threads": threads,
        "gates": gates, "wall_ms": f"{wall:.3f}",
        "hostname": m["hostname"], "commit": m["commit"], "dtype": m["dtype"], "timestamp": m["timestamp"]
    }

# ---------------------------------------------------------------------
# individual experiments

def bench_qubits(ns, depth, backend, out_path):
    logger.info("qubits scaling -> %s", out_path)
    new_csv(out_path)
    threads = 0 if backend == "serial" else pool_threads()
    for i, n in enumerate(ns):
        ops = random_ops(n, depth, seed=42)
        if i == 0:
            warmup(n, ops, backend)
        wall = time_run(n, ops, backend)
        write_row(out_path, _row(n, depth, backend, threads, len(ops), wall))
        print(f"  n={n}  wall={wall:.2f} ms")

def bench_threads(n, depth, threads_list, out_path):
    logger.info("thread scaling -> %s", out_path)
    new_csv(out_path)
    ops = random_ops(n, depth, seed=123)
    warmup(n, ops, "numba", threads=1)
    t1 = time_run(n, ops, "numba", threads=1)
    pool = pool_threads()
    print(f"  pool={pool}  T1={t1:.1f} ms")

    for t in threads_list:
        tt = min(int(t), pool)
        if tt != t:
            logger.warning("requested t=%d > pool=%d; using t=%d", t, pool, tt)
        wall = time_run(n, ops, "numba", threads=tt)
        speedup = t1 / wall if wall > 0 else float("nan")
        write_row(out_path, _row(n, depth, "numba", tt, len(ops), wall))
        print(f"  t={tt}  wall={wall:.2f} ms  speedup={speedup:.2f}x")

def bench_depth(n, depths, backend, out_path):
    logger.info("depth scaling -> %s", out_path)
    new_csv(out_path)
    threads = 0 if backend == "serial" else pool_threads()
    warmup(n, random_ops(n, min(depths), seed=7), backend)

    for d in depths:
        ops = random_ops(n, d, seed=7)
        wall = time_run(n, ops, backend)
        write_row(out_path, _row(n, d, backend, threads, len(ops), wall))
        print(f"  depth={d}  wall={wall:.2f} ms")

# ---------------------------------------------------------------------
def main(argv=None):
    p = argparse.ArgumentParser(description="qregsim benchmarks -> data/<backend>/*.csv")
    p.add_argument("--log-level", type=str, default="INFO")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_qubits = sub.add_parser("qubits")
    p_qubits.add_argument("--ns", type=str, required=True)
    p_qubits.add_argument("--depth", type=int, default=100)
    p_qubits.add_argument("--backend", type=str, default="numba", choices=["serial","numba"])

    p_threads = sub.add_parser("threads")
    p_threads.add_argument("--n", type=int, default=16)
    p_threads.add_argument("--depth", type=int, default=200)
    p_threads.add_argument("--threads", type=str, default="1,2,4,8,16")

    p_depth = sub.add_parser("depth")
    p_depth.add_argument("--n", type=int, default=12)
    p_depth.add_argument("--depths", type=str, default="10,50,100,300,600")
    p_depth.add_argument("--backend", type=str, default="numba", choices=["serial","numba"])

    args = p.parse_args(argv)
    set_log_level(args.log_level)

    if args.cmd == "qubits":
        ns = [int(x) for x in args.ns.split(",")]
        bench_qubits(ns, args.depth, args.backend, os.path.join(backend_dir(args.backend), "qubits.csv"))

    elif args.cmd == "threads":
        ts = [int(x) for x in args.threads.split(",")]
        bench_threads(args.n, args.depth, ts, os.path.join(backend_dir("numba"), "threads.csv"))

    elif args.cmd == "depth":
        ds = [int(x) for x in args.depths.split(",")]
        bench_depth(args.n, ds, args.backend, os.path.join(backend_dir(args.backend), "depth.csv"))

if __name__ == "__main__":
    main()
