"""
Sales Intel Dashboard

A Streamlit dashboard for the consolidated 2025 + 2026 sales data.
Run with: streamlit run app.py
"""

import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent / "src"))

import streamlit as st
import pandas as pd
import plotly.graph_objects as go

from sales_intel.config import configure_logging
from sales_intel.controller import SalesController
from sales_intel.core.aggregation import (
    ALL,
    MONTHS,
    MONTHS_SHORT,
    PivotMatrix,
    SalesFilter,
    available_categories,
    available_stores,
    build_matrices,
    compute_category_mix,
    compute_key_metrics,
    compute_monthly_trend,
    cutoff_label,
)
from sales_intel.core.ranking import rank_stores
from sales_intel.exceptions import SalesIntelError

# Page config
st.set_page_config(
    page_title="Sales Intel",
    page_icon="📊",
    layout="wide",
)

st.title("📊 Dashboard de Ventas")
st.caption("Sistema de análisis consolidado (2025 + 2026). Los datos se guardan automáticamente.")

COLORS = ["#3b82f6", "#10b981", "#f59e0b", "#ef4444", "#8b5cf6", "#ec4899"]

UPLOAD_ZONES = [
    ("history2025", "Histórico 2025", "Fecha, Tienda, Grupo, Descripcion, Cantidad"),
    ("report2026", "Reporte 2026", "Fecha final, EAN, Descripción del ítem, Unidades"),
    ("skuMaster", "Maestro SKU", "SKU, Descripcion, Grupo"),
    ("inventory", "Inventario", "SKU, Descripción, Inventario, Tienda"),
]


@st.cache_resource
def get_controller() -> SalesController:
    """One controller (and database connection) per server process."""
    configure_logging()
    controller = SalesController()
    controller.reload()
    return controller


controller = get_controller()


def format_money(value: float) -> str:
    return f"${value:,.0f}"


def render_matrix(matrix: PivotMatrix, caption: str | None = None):
    """Matrix with row and column totals; cells without sales show '-'."""
    st.subheader(matrix.title)
    if caption:
        st.caption(f"CORTE AL: {caption}")
    st.markdown(f"**Total General:** {matrix.grand_total:,}")

    if not matrix.rows:
        st.info("Sin datos para los filtros seleccionados")
        return

    table = matrix.to_table()
    labels = table.columns[0]
    display = table.apply(
        lambda col: col if col.name == labels
        else col.map(lambda v: "-" if pd.isna(v) else f"{int(v):,}")
    )
    st.dataframe(display, use_container_width=True, hide_index=True)


# --- Ingestion ---
st.header("Carga de Archivos")
upload_cols = st.columns(len(UPLOAD_ZONES))

for col, (file_type, title, subtitle) in zip(upload_cols, UPLOAD_ZONES):
    with col:
        uploaded = st.file_uploader(
            title, type=["xlsx"], key=f"upload-{file_type}", help=subtitle
        )
        if uploaded is not None and st.button("Procesar", key=f"process-{file_type}"):
            try:
                with st.spinner("Procesando archivo..."):
                    controller.upload(uploaded, file_type, name=uploaded.name)
                st.success(f"{uploaded.name} cargado")
            except SalesIntelError:
                st.error("Error al procesar el archivo. Verifique el formato.")

state = controller.state

if state.files:
    with st.expander(f"🗄️ Archivos en Base de Datos ({len(state.files)})", expanded=False):
        for stored in state.files:
            info_col, confirm_col, delete_col = st.columns([4, 2, 1])
            with info_col:
                st.markdown(
                    f"**{stored.name}** · {stored.type} · "
                    f"{stored.upload_date:%d/%m/%Y} · {stored.row_count:,} filas"
                )
            with confirm_col:
                confirmed = st.checkbox("Confirmar borrado", key=f"confirm-{stored.id}")
            with delete_col:
                if st.button("🗑️", key=f"delete-{stored.id}"):
                    try:
                        controller.delete(stored.id, confirm=lambda: confirmed)
                        st.rerun()
                    except SalesIntelError:
                        st.error("No se pudo borrar el archivo.")

state = controller.state
data = list(state.consolidated)

if not data:
    st.info("Cargue archivos para ver el análisis")
    st.stop()

# --- Key Metrics Row ---
metrics = compute_key_metrics(data)
col1, col2, col3, col4 = st.columns(4)
with col1:
    st.metric("Unidades Totales", f"{metrics['total_quantity']:,}")
with col2:
    st.metric("Venta Neta (2026)", format_money(metrics["total_revenue"]))
with col3:
    store, qty = metrics["top_store"]
    st.metric("Mejor Tienda", store, delta=f"{qty:,} und")
with col4:
    product, qty = metrics["top_product"]
    st.metric("Producto Top", product[:30], delta=f"{qty:,} und")

if state.unmapped_skus:
    st.warning(f"{len(state.unmapped_skus):,} SKUs del reporte 2026 no están en el maestro")

charts_tab, reports_tab = st.tabs(["📈 Gráficos", "📋 Reportes"])

with charts_tab:
    left_col, right_col = st.columns([2, 1])

    with left_col:
        trend = compute_monthly_trend(data)
        fig_trend = go.Figure()
        for year, color in (("2025", COLORS[0]), ("2026", COLORS[1])):
            fig_trend.add_trace(
                go.Scatter(x=trend["name"], y=trend[year], name=year, line_color=color)
            )
        fig_trend.update_layout(
            title="Tendencia Mensual (Unidades)",
            height=350,
            margin=dict(t=40, b=20, l=20, r=20),
        )
        st.plotly_chart(fig_trend, use_container_width=True)

    with right_col:
        mix = compute_category_mix(data)
        fig_mix = go.Figure(
            data=[
                go.Pie(
                    labels=mix["name"],
                    values=mix["value"],
                    hole=0.4,
                    marker_colors=COLORS,
                )
            ]
        )
        fig_mix.update_layout(
            title="Mix por Categoría",
            height=350,
            margin=dict(t=40, b=20, l=20, r=20),
            legend=dict(orientation="h", yanchor="bottom", y=-0.3),
        )
        st.plotly_chart(fig_mix, use_container_width=True)

with reports_tab:
    # --- Filters ---
    filter_cols = st.columns(4)
    with filter_cols[0]:
        year = st.selectbox("Año", [ALL, "2025", "2026"], format_func=lambda y: "Todos" if y == ALL else y)
    with filter_cols[1]:
        categories = st.multiselect("Categorías", available_categories(data))
    with filter_cols[2]:
        months = st.multiselect(
            "Meses", list(range(12)), format_func=lambda m: MONTHS_SHORT[m]
        )
    with filter_cols[3]:
        store_choice = st.selectbox(
            "Tienda", [ALL] + available_stores(data), format_func=lambda s: "Todas" if s == ALL else s
        )

    sales_filter = SalesFilter(
        year=year,
        categories=frozenset(categories),
        months=frozenset(months),
        store=store_choice,
    )
    matrices = build_matrices(data, sales_filter)
    caption = cutoff_label(year)

    render_matrix(matrices.store_category, caption)
    render_matrix(matrices.store_month, caption)

    # --- Ranking ---
    st.subheader("🏆 Ranking Acumulado de Tiendas")
    ranking = rank_stores(matrices.store_month)
    if ranking.final:
        rows = []
        for entry in ranking.final:
            row = {"Tienda": entry.store}
            for month, short in zip(MONTHS, MONTHS_SHORT):
                rank = ranking.monthly_ranks.loc[entry.store, month]
                row[f"Rank {short}"] = "-" if pd.isna(rank) else int(rank)
            row["Puntos Acum."] = entry.points
            row["Ranking Final"] = entry.position
            rows.append(row)
        st.dataframe(pd.DataFrame(rows), use_container_width=True, hide_index=True)
    else:
        st.info("Sin tiendas para rankear")

    render_matrix(matrices.product_month, caption)
    render_matrix(matrices.product_store, caption)

# --- Footer ---
st.divider()
st.caption(
    "Built with Streamlit | "
    f"Archivos: {len(state.files)} | "
    f"Registros: {len(state.records):,} | "
    f"SKUs en maestro: {len(state.skus):,} | "
    f"Inventario: {len(state.inventory):,} líneas"
)
