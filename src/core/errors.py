"""
Errors — таксономия ошибок аллокатора

Четыре класса фатальных ошибок, которые ядро пробрасывает вызывающей стороне
(host framework). Внутренних retry/backoff нет: решение о повторе принимает
вызывающий.

- ConfigurationError: ошибки конфигурации (фатальны при создании стратегии)
- InvariantViolation: нарушение инвариантов внешней системы (отрицательный
  PV/FV, отсутствующий order book для запрошенной maturity)
- InsufficientLiquidity: невозможно освободить запрошенный капитал
- OrderSubmissionError: рынок отклонил размещение ордера в deposit-пути

Частичные операционные отказы (отклонённый cancel) сюда не входят —
они обрабатываются локально (skip and continue).
"""


class AllocatorError(Exception):
    """Базовый класс всех ошибок аллокатора."""


class ConfigurationError(AllocatorError, ValueError):
    """
    Некорректная конфигурация стратегии.

    Примеры: нулевые/невалидные веса, пустая currency, несовпадение asset
    с токеном custodial vault, отсутствие рынка для currency.

    Никогда не восстанавливается — стратегия не создаётся.
    """


class InvariantViolation(AllocatorError):
    """
    Нарушение инварианта внешней системы.

    Отрицательные present/future value позиции или отсутствие order book
    для maturity, которую ядро явно обрабатывает. Признак порчи состояния
    во внешней системе, а не ошибки пользователя: вызов прерывается.
    """


class InsufficientLiquidity(AllocatorError):
    """
    Недостаточно ликвидности для выполнения запроса.

    Пробрасывается, если free_funds не набрал target после обеих фаз
    (cancel + unwind) или если симуляция unwind сообщила о недостаточном
    обеспечении. Меньшая сумма молча никогда не возвращается.
    """

    def __init__(self, message: str, requested: int = 0, available: int = 0):
        super().__init__(message)
        self.requested = requested
        self.available = available


class OrderSubmissionError(AllocatorError):
    """
    Рынок отклонил размещение ордера в deposit-пути.

    В deploy отказ размещения фатален; в tend он логируется.
    """

    def __init__(self, message: str, maturity: int = 0, tier_index: int = -1):
        super().__init__(message)
        self.maturity = maturity
        self.tier_index = tier_index
