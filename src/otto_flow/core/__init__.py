# src/otto_flow/core/__init__.py
"""
Core do Otto Flow.

Este pacote contém a lógica pura e síncrona do Otto Flow: validação do
grafo de pipeline, ciclo de vida de status, normalização de
identificadores e correlação de logs.

O core é projetado para ser:
    - determinístico
    - testável de forma isolada
    - livre de I/O (rede e persistência pertencem a `otto_flow.api`)

Componentes principais:
    - identifiers → ids curtos <-> canônicos, rotas de navegação
    - graph       → modelo do grafo, configuração tipada, validador
    - lifecycle   → transições de status, derivação, execuções
    - logs        → agrupamento, filtros, consultas e resumo de registros
    - entities    → Project / Pipeline / PipelineStep
    - results     → Idle | Loading | Success | Failure
    - config      → defaults + override local, merge e hashing
    - errors / exceptions → payloads canônicos e exceções tipadas

Princípios fundamentais:
    - Condições esperadas são valores (violações, conflitos, NoData)
    - Exceções apenas para violações de invariante e fronteiras remotas

Limites explícitos:
    - Não executa builds
    - Não renderiza UI
    - Não persiste dados
"""
