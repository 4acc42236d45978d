# CertMin SDK - Command Line Driver Tests
# Copyright (c) 2024 CertMin Contributors. All rights reserved.

"""Tests for the interactive polynomial driver."""

import logging

import pytest
from fractions import Fraction

from certmin import cli
from certmin.functions import PolynomialTerm


def _scripted(*answers):
    replies = iter(answers)
    asked = []

    def prompt(text):
        asked.append(text)
        return next(replies)

    return prompt, asked


@pytest.fixture
def output():
    return []


class TestFormatPolynomial:
    def test_cubic(self):
        terms = [PolynomialTerm(1, 0, 3), PolynomialTerm(-3, 0, 1)]
        assert cli.format_polynomial(terms) == "1x^3 + -3x"

    def test_constant_and_fraction(self):
        terms = [PolynomialTerm(Fraction(1, 2), 0, 2), PolynomialTerm(7, 0, 0)]
        assert cli.format_polynomial(terms) == "(1/2)x^2 + 7"

    def test_empty(self):
        assert cli.format_polynomial([]) == "0"


class TestReadPolynomial:
    def test_zero_coefficients_skipped(self):
        prompt, asked = _scripted("3", "1", "0", "-3", "0")
        terms = cli.read_polynomial(prompt)
        assert [(t.coefficient, t.exponent) for t in terms] == [(1, 3), (-3, 1)]
        assert asked[0] == "Enter degree of polynomial: "
        assert asked[1] == "Enter parameter 'a' for term 'ax^3': "
        assert asked[-1] == "Enter parameter 'a' for term 'ax^0': "

    def test_rational_coefficients(self):
        prompt, _ = _scripted("1", "1/3", "0.25")
        terms = cli.read_polynomial(prompt)
        assert terms[0].coefficient == Fraction(1, 3)
        assert terms[1].coefficient == Fraction(1, 4)

    def test_negative_degree(self):
        prompt, _ = _scripted("-1")
        with pytest.raises(ValueError):
            cli.read_polynomial(prompt)


class TestMain:
    def test_square(self, output):
        prompt, asked = _scripted("2", "1", "0", "0", "2", "0.05")
        assert cli.main(prompt, output.append) == 0
        assert output[0] == "Chosen polynomial: 1x^2"
        assert output[1] == ""
        assert output[2].startswith("Global search result: f([")
        assert output[3].startswith("Local search estimate: f(")
        assert asked[-2] == "Enter 'n' value of starting interval [-2^n,2^n]: "
        assert asked[-1] == "Enter number of seconds to run for: "

    @pytest.mark.parametrize("answers", [
        ("abc",),
        ("-2",),
        ("1", "x"),
        ("1", "1", "0", "two"),
        ("1", "1", "0", "2", "soon"),
    ])
    def test_invalid_input(self, output, answers):
        prompt, _ = _scripted(*answers)
        assert cli.main(prompt, output.append) == 1
        assert output[-1].startswith("error: ")

    def test_negative_seconds(self, output):
        prompt, _ = _scripted("1", "1", "0", "2", "-1")
        assert cli.main(prompt, output.append) == 1
        assert output[-1].startswith("error: time_budget")

    def test_log_level_from_environment(self, monkeypatch):
        monkeypatch.setenv("CERTMIN_LOG_LEVEL", "debug")
        pkg_logger = logging.getLogger("certmin")
        old_level, old_handlers = pkg_logger.level, list(pkg_logger.handlers)
        try:
            cli._configure_logging()
            assert pkg_logger.level == logging.DEBUG
            assert pkg_logger.handlers
        finally:
            pkg_logger.setLevel(old_level)
            pkg_logger.handlers = old_handlers
