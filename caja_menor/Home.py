"""Main entry point for the Streamlit multi-page app.

Pages in the pages/ directory automatically appear in the sidebar.
"""

from __future__ import annotations

import sys
from pathlib import Path

import streamlit as st

# Add project root to path for imports
project_root = Path(__file__).parent.parent.resolve()
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from caja_menor import config
from caja_menor.ui import CajaMenorUI


def main() -> None:
    config.configure_logging()
    config.ensure_data_directories()
    CajaMenorUI().setup_page_config()

    st.title("💰 Sistema de Gestión")
    st.markdown("Selecciona el módulo al que deseas acceder en la barra lateral.")
    col_caja, col_registros = st.columns(2)
    with col_caja:
        st.subheader("💵 Caja Menor")
        st.write("Conteo de billetes y monedas, encomiendas, facturas y vales contra el fondo inicial.")
        if hasattr(st, 'page_link'):
            st.page_link("pages/1_💵_Caja_Menor.py", label="Ingresar", icon="💵")
    with col_registros:
        st.subheader("📋 Registros")
        st.write("Entradas y salidas de caja menor con historial de movimientos.")
        if hasattr(st, 'page_link'):
            st.page_link("pages/2_📋_Registros.py", label="Ingresar", icon="📋")


if __name__ == "__main__":
    main()
