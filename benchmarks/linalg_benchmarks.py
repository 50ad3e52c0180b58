"""Batched per-draw linear algebra against an explicit loop over draws."""

from __future__ import annotations

import argparse
import json
from dataclasses import asdict, dataclass
from typing import Callable

import jax.numpy as jnp
import numpy as np

from _bench_utils import host_metadata, sample_ms
from rvar_jax import RandomVariable, cholesky, matmul


@dataclass(frozen=True)
class LinalgCase:
    name: str
    note: str
    batched: Callable[..., object]
    looped: Callable[..., object]
    args: tuple[object, ...]


@dataclass(frozen=True)
class LinalgRow:
    name: str
    note: str
    ndraws: int
    size: int
    batched_p50_ms: float
    looped_p50_ms: float
    batched_mean_ms: float
    looped_mean_ms: float
    speedup: float


def _looped_matmul(x: RandomVariable, y: RandomVariable):
    return jnp.stack([x.data[i] @ y.data[i] for i in range(x.ndraws)])


def _looped_cholesky(x: RandomVariable):
    return jnp.stack([jnp.linalg.cholesky(x.data[i]).T for i in range(x.ndraws)])


def _build_cases(ndraws: int, size: int, seed: int) -> list[LinalgCase]:
    rng = np.random.default_rng(seed)
    a = rng.normal(size=(ndraws, size, size))
    spd = np.einsum("dij,dkj->dik", a, a) + size * np.eye(size)
    x = RandomVariable(a)
    y = RandomVariable(rng.normal(size=(ndraws, size, size)))
    sigma = RandomVariable(spd)
    return [
        LinalgCase(
            name="matmul",
            note="einsum over the draw axis vs per-draw @",
            batched=matmul,
            looped=_looped_matmul,
            args=(x, y),
        ),
        LinalgCase(
            name="cholesky",
            note="batched factorisation vs per-draw factorisation",
            batched=cholesky,
            looped=_looped_cholesky,
            args=(sigma,),
        ),
    ]


def run(ndraws: int, size: int, *, repeats: int, warmup: int, samples: int, seed: int) -> list[LinalgRow]:
    rows: list[LinalgRow] = []
    for case in _build_cases(ndraws, size, seed):
        batched = sample_ms(case.batched, case.args, repeats=repeats, warmup=warmup, samples=samples)
        looped = sample_ms(case.looped, case.args, repeats=repeats, warmup=warmup, samples=samples)
        rows.append(
            LinalgRow(
                name=case.name,
                note=case.note,
                ndraws=ndraws,
                size=size,
                batched_p50_ms=float(np.median(batched)),
                looped_p50_ms=float(np.median(looped)),
                batched_mean_ms=float(np.mean(batched)),
                looped_mean_ms=float(np.mean(looped)),
                speedup=float(np.median(looped) / max(np.median(batched), 1e-9)),
            )
        )
    return rows


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--ndraws", type=int, default=4000)
    parser.add_argument("--size", type=int, default=4)
    parser.add_argument("--repeats", type=int, default=3)
    parser.add_argument("--warmup", type=int, default=1)
    parser.add_argument("--samples", type=int, default=5)
    parser.add_argument("--seed", type=int, default=0)
    args = parser.parse_args()

    rows = run(args.ndraws, args.size, repeats=args.repeats, warmup=args.warmup, samples=args.samples, seed=args.seed)
    print(json.dumps({"host": host_metadata(), "rows": [asdict(row) for row in rows]}, indent=2))


if __name__ == "__main__":
    main()
