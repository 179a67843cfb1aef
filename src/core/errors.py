"""
Иерархия исключений ядра ценообразования vAMM.

- InvalidArgument: нарушено предусловие вызывающей стороны
- ZeroReserveError: нулевой резерв в роли делителя (частный случай InvalidArgument)
- DomainError: нарушен внутренний арифметический инвариант (дефект логики)

Повторов нет: ядро — чистые вычисления, ошибка детерминирована для одного входа.
"""


class InvalidArgument(ValueError):
    """Нарушено предусловие, переданное вызывающей стороной."""


class ZeroReserveError(InvalidArgument):
    """
    Нулевой резерв там, где он используется как делитель.

    Проверяется явно до деления, чтобы сообщение несло контекст
    (какой резерв, какая операция).
    """

    def __init__(self, reserve_name: str, operation: str) -> None:
        self.reserve_name = reserve_name
        self.operation = operation
        super().__init__(f"{reserve_name} must be non-zero in {operation}")


class DomainError(ArithmeticError):
    """
    Нарушен внутренний инвариант арифметики.

    Примеры: цена сдвинулась против направления сделки, solver целевой цены
    перелетел исходный разрыв, sqrt от отрицательного числа.

    Не восстанавливаемая ситуация: вычисление прерывается и ошибка
    пропагирует наверх. Неверная цена хуже громкого отказа.
    """
