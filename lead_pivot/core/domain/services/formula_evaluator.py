"""
Сервис вычисления пользовательских формул.

Формула ссылается на показатели сводной таблицы по имени
(поле_функция, например "ltv_sum / count_count") и допускает только
арифметику, числа и функции abs, min, max, round.
"""

import ast
import math
import operator
from typing import Any, Callable, Dict, Mapping, Optional

from loguru import logger

_BINARY_OPERATORS: Dict[type, Callable[[Any, Any], Any]] = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.FloorDiv: operator.floordiv,
    ast.Mod: operator.mod,
    ast.Pow: operator.pow,
}

_UNARY_OPERATORS: Dict[type, Callable[[Any], Any]] = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
}

_FUNCTIONS: Dict[str, Callable[..., Any]] = {
    "abs": abs,
    "min": min,
    "max": max,
    "round": round,
}

class FormulaError(ValueError):
    """Формула содержит недопустимую конструкцию."""


class FormulaEvaluatorService:
    """Сервис для безопасного вычисления формул над показателями."""

    def compile(self, expression: str) -> Optional[ast.Expression]:
        """
        Разбирает формулу.

        Args:
            expression: Текст формулы.

        Returns:
            Дерево выражения или None для пустой или некорректной формулы.
        """
        if not expression or not expression.strip():
            return None
        try:
            tree = ast.parse(expression.strip(), mode="eval")
            self._validate(tree.body)
            return tree
        except (SyntaxError, FormulaError) as e:
            logger.warning(f"Формула '{expression}' отклонена: {e}")
            return None

    def evaluate(
        self, expression: "str | ast.Expression", variables: Mapping[str, float]
    ) -> Optional[float]:
        """
        Вычисляет формулу.

        Args:
            expression: Текст формулы или результат compile().
            variables: Значения показателей по имени.

        Returns:
            Результат или None при ошибке (деление на ноль,
            неизвестное имя, недопустимая конструкция).
        """
        tree = self.compile(expression) if isinstance(expression, str) else expression
        if tree is None:
            return None

        try:
            result = float(self._eval(tree.body, variables))
        except ZeroDivisionError:
            return None
        except (FormulaError, TypeError, ValueError, OverflowError) as e:
            logger.debug(f"Не удалось вычислить формулу: {e}")
            return None

        if math.isnan(result) or math.isinf(result):
            return None
        return result

    def _validate(self, node: ast.AST) -> None:
        """Проверяет, что выражение содержит только разрешённые узлы."""
        if isinstance(node, ast.Constant):
            if isinstance(node.value, bool) or not isinstance(node.value, (int, float)):
                raise FormulaError("допускаются только числовые константы")
        elif isinstance(node, ast.Name):
            pass
        elif isinstance(node, ast.BinOp):
            if type(node.op) not in _BINARY_OPERATORS:
                raise FormulaError(f"оператор {type(node.op).__name__} не поддерживается")
            self._validate(node.left)
            self._validate(node.right)
        elif isinstance(node, ast.UnaryOp):
            if type(node.op) not in _UNARY_OPERATORS:
                raise FormulaError(f"оператор {type(node.op).__name__} не поддерживается")
            self._validate(node.operand)
        elif isinstance(node, ast.Call):
            if not isinstance(node.func, ast.Name) or node.func.id not in _FUNCTIONS:
                raise FormulaError("допускаются только функции abs, min, max, round")
            if node.keywords:
                raise FormulaError("именованные аргументы не поддерживаются")
            for arg in node.args:
                self._validate(arg)
        else:
            raise FormulaError(f"конструкция {type(node).__name__} не поддерживается")

    def _eval(self, node: ast.AST, variables: Mapping[str, float]) -> Any:
        if isinstance(node, ast.Constant):
            return node.value
        if isinstance(node, ast.Name):
            if node.id not in variables:
                raise FormulaError(f"неизвестный показатель '{node.id}'")
            return variables[node.id]
        if isinstance(node, ast.BinOp):
            # Вещественная арифметика: переполнение даёт OverflowError или inf,
            # а не целое число неограниченной длины
            left = float(self._eval(node.left, variables))
            right = float(self._eval(node.right, variables))
            return _BINARY_OPERATORS[type(node.op)](left, right)
        if isinstance(node, ast.UnaryOp):
            return _UNARY_OPERATORS[type(node.op)](self._eval(node.operand, variables))
        if isinstance(node, ast.Call):
            args = [self._eval(arg, variables) for arg in node.args]
            return _FUNCTIONS[node.func.id](*args)
        raise FormulaError(f"конструкция {type(node).__name__} не поддерживается")
