"""004: create sorteos, jugadas and resultados

Revision ID: 004
Revises: 003
Create Date: 2026-10-17
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE sorteos (
            id              UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            nombre          VARCHAR(120)    NOT NULL,
            codigo          VARCHAR(20)     NOT NULL,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_sorteos_codigo    UNIQUE (codigo)
        );
    """)

    op.execute("""
        CREATE TABLE jugadas (
            id              UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            banca_id        UUID            NOT NULL REFERENCES bancas (id),
            vendedor_id     UUID            NOT NULL REFERENCES vendedores (id),
            sorteo_id       UUID            NOT NULL REFERENCES sorteos (id),
            numeros         SMALLINT[]      NOT NULL,
            fecha_hora      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            estado          VARCHAR(20)     NOT NULL DEFAULT 'valida',
            premio          NUMERIC(12, 2)  NOT NULL DEFAULT 0,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_jugadas_estado    CHECK (estado IN ('valida', 'anulada')),
            CONSTRAINT ck_jugadas_numeros_len CHECK (cardinality(numeros) BETWEEN 1 AND 3),
            CONSTRAINT ck_jugadas_numeros_range CHECK (0 <= ALL (numeros) AND 99 >= ALL (numeros)),
            CONSTRAINT ck_jugadas_premio    CHECK (premio >= 0)
        );
    """)
    op.execute("CREATE INDEX idx_jugadas_fecha_hora ON jugadas (fecha_hora DESC);")
    op.execute("CREATE INDEX idx_jugadas_banca ON jugadas (banca_id, fecha_hora DESC);")
    op.execute("CREATE INDEX idx_jugadas_vendedor ON jugadas (vendedor_id, fecha_hora DESC);")
    op.execute("CREATE INDEX idx_jugadas_sorteo ON jugadas (sorteo_id, fecha_hora DESC);")
    op.execute("CREATE INDEX idx_jugadas_numeros ON jugadas USING GIN (numeros);")
    op.execute("""
        CREATE TRIGGER trg_jugadas_updated_at
            BEFORE UPDATE ON jugadas
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)

    op.execute("""
        CREATE TABLE resultados (
            id              UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            sorteo_id       UUID            NOT NULL REFERENCES sorteos (id),
            fecha           DATE            NOT NULL,
            numeros         SMALLINT[],
            publicado       BOOLEAN         NOT NULL DEFAULT FALSE,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_resultados_sorteo_fecha UNIQUE (sorteo_id, fecha)
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_resultados_updated_at
            BEFORE UPDATE ON resultados
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("COMMENT ON TABLE resultados IS 'Solo lectura para el backend; publicado bloquea anulaciones';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS resultados CASCADE;")
    op.execute("DROP TABLE IF EXISTS jugadas CASCADE;")
    op.execute("DROP TABLE IF EXISTS sorteos CASCADE;")
