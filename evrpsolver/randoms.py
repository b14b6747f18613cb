"""Seeded uniform and Gaussian random numbers (Park-Miller with Bays-Durham shuffle)."""

from __future__ import annotations

import math
import random
import struct

_IA = 16807
_IM = 2147483647
_AM = 1.0 / _IM
_IQ = 127773
_IR = 2836
_NTAB = 32
_NDIV = 1 + (_IM - 1) // _NTAB
_EPS = 1.2e-7
_RNMX = 1.0 - _EPS


def _single(value: float) -> float:
    """Round to single precision."""
    return struct.unpack("f", struct.pack("f", value))[0]


class Randoms:
    """A reproducible source of random deviates."""

    def __init__(self, seed: int) -> None:
        self._idum = -seed
        self._iy = 0
        self._iv = [0] * _NTAB
        self._iset = False
        self._gset = 0.0
        self._rng = random.Random(seed)

    def _ran1(self) -> float:
        if self._idum <= 0 or not self._iy:
            self._idum = 1 if -self._idum < 1 else -self._idum
            for j in range(_NTAB + 7, -1, -1):
                self._next()
                if j < _NTAB:
                    self._iv[j] = self._idum
            self._iy = self._iv[0]
        self._next()
        j = self._iy // _NDIV
        self._iy = self._iv[j]
        self._iv[j] = self._idum
        temp = _single(_AM * self._iy)
        return _single(_RNMX) if temp > _RNMX else temp

    def _next(self) -> None:
        k = self._idum // _IQ
        self._idum = _IA * (self._idum - k * _IQ) - _IR * k
        if self._idum < 0:
            self._idum += _IM

    def _gaussdev(self) -> float:
        if self._idum < 0:
            self._iset = False
        if self._iset:
            self._iset = False
            return self._gset
        while True:
            v1 = _single(2.0 * self._ran1() - 1.0)
            v2 = _single(2.0 * self._ran1() - 1.0)
            rsq = _single(v1 * v1 + v2 * v2)
            if 0.0 < rsq < 1.0:
                break
        fac = _single(math.sqrt(-2.0 * math.log(rsq) / rsq))
        self._gset = _single(v1 * fac)
        self._iset = True
        return _single(v2 * fac)

    def uniform(self) -> float:
        """A uniform deviate strictly between 0 and 1."""
        return self._ran1()

    def normal(self, avg: float, sigma: float) -> float:
        """A Gaussian deviate with the given mean and standard deviation."""
        return avg + sigma * self._gaussdev()

    def sorte(self, m: int) -> float:
        """A uniform number between -m and m."""
        return self._rng.random() * 2.0 * m - m