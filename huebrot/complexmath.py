"""Minimal complex number types used by the escape-time loop."""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class ComplexNumber:
    """Immutable complex value. Every operation returns a new instance."""

    real: float
    imaginary: float

    def squared_magnitude(self) -> float:
        return self.real * self.real + self.imaginary * self.imaginary

    def magnitude(self) -> float:
        return math.sqrt(self.squared_magnitude())

    def conjugate(self) -> ComplexNumber:
        return ComplexNumber(self.real, -self.imaginary)

    def add(self, other: ComplexNumber) -> ComplexNumber:
        return ComplexNumber(self.real + other.real, self.imaginary + other.imaginary)

    def subtract(self, other: ComplexNumber) -> ComplexNumber:
        return ComplexNumber(self.real - other.real, self.imaginary - other.imaginary)

    def multiply(self, other: ComplexNumber) -> ComplexNumber:
        real = self.real * other.real - self.imaginary * other.imaginary
        imaginary = self.real * other.imaginary + self.imaginary * other.real
        return ComplexNumber(real, imaginary)

    __add__ = add
    __sub__ = subtract
    __mul__ = multiply


class MutableComplex:
    """In-place accumulator for the hot loop.

    Instances are owned by a single row worker and are never handed across
    threads. Results match :class:`ComplexNumber` bit for bit.
    """

    __slots__ = ("real", "imaginary")

    def __init__(self, real: float = 0.0, imaginary: float = 0.0) -> None:
        self.real = real
        self.imaginary = imaginary

    @classmethod
    def from_value(cls, value: ComplexNumber) -> MutableComplex:
        return cls(value.real, value.imaginary)

    def squared_magnitude(self) -> float:
        return self.real * self.real + self.imaginary * self.imaginary

    def multiply_by(self, other) -> MutableComplex:
        real = self.real * other.real - self.imaginary * other.imaginary
        imaginary = self.real * other.imaginary + self.imaginary * other.real
        self.real = real
        self.imaginary = imaginary
        return self

    def add_to(self, other) -> MutableComplex:
        self.real += other.real
        self.imaginary += other.imaginary
        return self

    def subtract_from(self, other) -> MutableComplex:
        self.real -= other.real
        self.imaginary -= other.imaginary
        return self

    def freeze(self) -> ComplexNumber:
        return ComplexNumber(self.real, self.imaginary)

    def __repr__(self) -> str:
        return f"MutableComplex({self.real!r}, {self.imaginary!r})"


def squared_magnitude(z: ComplexNumber) -> float:
    return z.squared_magnitude()


def add(a: ComplexNumber, b: ComplexNumber) -> ComplexNumber:
    return a.add(b)


def multiply(a: ComplexNumber, b: ComplexNumber) -> ComplexNumber:
    return a.multiply(b)


def conjugate(z: ComplexNumber) -> ComplexNumber:
    return z.conjugate()
