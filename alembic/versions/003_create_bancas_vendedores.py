"""003: create bancas, vendedores and bancas_vendedores

Revision ID: 003
Revises: 002
Create Date: 2026-10-17
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE bancas (
            id              UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            nombre          VARCHAR(120)    NOT NULL,
            ubicacion       VARCHAR(255),
            estado          VARCHAR(20)     NOT NULL DEFAULT 'activa',
            ip_whitelist    TEXT[]          NOT NULL DEFAULT '{}',
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_bancas_nombre     UNIQUE (nombre),
            CONSTRAINT ck_bancas_estado     CHECK (estado IN ('activa', 'inactiva'))
        );
    """)
    op.execute("CREATE INDEX idx_bancas_estado ON bancas (estado, created_at DESC);")
    op.execute("""
        CREATE TRIGGER trg_bancas_updated_at
            BEFORE UPDATE ON bancas
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)

    op.execute("""
        CREATE TABLE vendedores (
            id              UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            nombre          VARCHAR(120)    NOT NULL,
            cedula          CHAR(11)        NOT NULL,
            telefono        VARCHAR(20),
            estado          VARCHAR(20)     NOT NULL DEFAULT 'activo',
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_vendedores_cedula UNIQUE (cedula),
            CONSTRAINT ck_vendedores_estado CHECK (estado IN ('activo', 'inactivo'))
        );
    """)
    op.execute("CREATE INDEX idx_vendedores_estado ON vendedores (estado, created_at DESC);")
    op.execute("""
        CREATE TRIGGER trg_vendedores_updated_at
            BEFORE UPDATE ON vendedores
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)

    op.execute("""
        CREATE TABLE bancas_vendedores (
            vendedor_id     UUID            NOT NULL REFERENCES vendedores (id) ON DELETE CASCADE,
            banca_id        UUID            NOT NULL REFERENCES bancas (id) ON DELETE CASCADE,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            PRIMARY KEY (vendedor_id, banca_id)
        );
    """)
    op.execute("CREATE INDEX idx_bancas_vendedores_banca ON bancas_vendedores (banca_id);")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS bancas_vendedores CASCADE;")
    op.execute("DROP TABLE IF EXISTS vendedores CASCADE;")
    op.execute("DROP TABLE IF EXISTS bancas CASCADE;")
