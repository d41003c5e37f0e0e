"""
Exemplo de uso completo do rules engine.

Este script demonstra:
1. Compilação de uma regra YAML
2. Registro de uma função customizada
3. Avaliação sobre um registro, com timing e log por folha
4. Avaliação vetorizada sobre um DataFrame
5. Serialização do resultado
"""

import pandas as pd

from rulesengine import (
    CompilationError,
    Options,
    RuleCompiler,
    dumps_result,
    evaluate,
    register_func,
    structlog_leaf_logger,
)
from rulesengine.application.config import Config
from rulesengine.domain.engine import RuleEvaluator

RULE_YAML = """
id: customer_eligibility
description: Cliente adulto, com e-mail válido e ao menos um pedido pago
operator: AND
children:
  - operator: GTE
    field: customer.age
    value: 18
  - operator: CUSTOM_FUNC
    field: customer.email
    value: [isEmail]
  - operator: ANY
    field: orders
    value:
      operator: AND
      children:
        - operator: EQ
          field: $.status
          value: paid
        - operator: GT
          field: $.total
          value: 50
  - operator: IF_THEN
    children:
      - operator: EQ
        field: customer.country
        value: BR
      - operator: MATCHES
        field: customer.zip
        value: '^\\d{5}-\\d{3}$'
"""


def is_email(actual, *args):
    """Função customizada: valida e-mail de forma simples."""
    text = str(actual)
    local, _, domain = text.partition("@")
    return bool(local) and "." in domain


def main():
    """Exemplo principal de uso do rules engine."""

    print("=" * 60)
    print("RULES ENGINE - EXEMPLO COMPLETO")
    print("=" * 60)

    config = Config({"ENVIRONMENT": "development", "LOG_FORMAT": "console", "LOG_LEVEL": "DEBUG"})
    config.configure_logging()

    # 1. Compilar regra
    print("\n1. Compilando regra YAML...")
    compiler = RuleCompiler()
    try:
        rule = compiler.compile_yaml(RULE_YAML)
    except CompilationError as e:
        print(f"❌ Erro de compilação: {e}")
        return
    stats = compiler.stats
    print(f"✅ {stats.total_nodes} nós, profundidade {stats.max_depth}, "
          f"campos: {', '.join(stats.fields)}")

    # 2. Registrar função customizada
    register_func("isEmail", is_email)

    # 3. Avaliar um registro
    print("\n2. Avaliando registro...")
    record = {
        "customer": {"age": 34, "email": "maria@example.com", "country": "BR", "zip": "50000-000"},
        "orders": [
            {"id": 1, "status": "pending", "total": 80.0},
            {"id": 2, "status": "paid", "total": 120.5},
        ],
    }
    options = Options().with_timing().with_logger(structlog_leaf_logger())
    result = evaluate(rule, record, options)
    print(f"Resultado: {result.result} ({result.time_taken_ms:.3f} ms)")
    for child in result.children:
        status = "✅" if child.result else "❌"
        print(f"  {status} {child.rule.operator.value} {child.rule.field or ''}")

    # 4. Avaliar um DataFrame
    print("\n3. Avaliando DataFrame...")
    frame = pd.DataFrame({
        "user.age": [25, 16, None],
        "user.plan": ["pro", "free", "pro"],
    })
    adult_pro = {
        "operator": "AND",
        "children": [
            {"operator": "GTE", "field": "user.age", "value": 18},
            {"operator": "IN", "field": "user.plan", "value": ["pro", "enterprise"]},
        ],
    }
    print(RuleEvaluator().evaluate_frame(adult_pro, frame).to_string())

    # 5. Serializar resultado
    print("\n4. Resultado serializado:")
    print(dumps_result(result, indent=2)[:800])


if __name__ == "__main__":
    main()
