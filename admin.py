import asyncio

import streamlit as st
import pandas as pd

from gymbooking.core.config_loader import load_gym_config
from gymbooking.models.results import BookingFilters
from gymbooking.services.session import open_session

def bookings_dataframe(bookings) -> pd.DataFrame:
    """Flattens BookingDetails rows into the table shown to the staff."""
    rows = []
    for b in bookings:
        rows.append({
            "id": b.id,
            "service": b.service.name if b.service else None,
            "date_time": b.slot.date_time if b.slot else None,
            "status": b.status.value,
            "user_id": b.user_id,
            "created_at": b.created_at,
        })
    return pd.DataFrame(rows, columns=["id", "service", "date_time", "status", "user_id", "created_at"])

async def sign_in(email: str, password: str):
    session = await open_session(load_gym_config())
    return await session.auth.sign_in(email, password)

async def load_dashboard(access_token: str, refresh_token: str, status: str = None):
    session = await open_session(load_gym_config(), access_token, refresh_token)
    stats = await session.admin.booking_stats()
    bookings = await session.admin.list_all_bookings(BookingFilters(status=status or None))
    return stats, bookings

def main():
    # Page Config
    st.set_page_config(
        page_title="Odin Gym Admin",
        page_icon="📅",
        layout="centered"
    )

    # Header
    st.title("Odin Gym - Panel de Reservas")

    if "tokens" not in st.session_state:
        with st.form("login"):
            email = st.text_input("Email")
            password = st.text_input("Contraseña", type="password")
            submitted = st.form_submit_button("Iniciar sesión")

        if submitted:
            result = asyncio.run(sign_in(email, password))
            if result.success and result.data.session:
                st.session_state["tokens"] = (result.data.session.access_token, result.data.session.refresh_token)
                st.rerun()
            else:
                st.error(result.error or "No se pudo iniciar sesión")
        return

    col_filter, col_buttons = st.columns([3, 1])
    status = col_filter.selectbox("Estado", ["", "confirmed", "cancelled", "completed"])
    if col_buttons.button("Actualizar"):
        st.rerun()
    if col_buttons.button("Cerrar sesión"):
        del st.session_state["tokens"]
        st.rerun()

    access_token, refresh_token = st.session_state["tokens"]
    stats, bookings = asyncio.run(load_dashboard(access_token, refresh_token, status))

    if not stats.success:
        st.error(stats.error)
        return

    # Metrics
    col1, col2, col3 = st.columns(3)
    col1.metric("Total de reservas", stats.data.total)
    col2.metric("Confirmadas", stats.data.confirmed)
    col3.metric("Próximas", stats.data.upcoming)

    col4, col5, col6 = st.columns(3)
    col4.metric("Canceladas", stats.data.cancelled)
    col5.metric("Completadas", stats.data.completed)
    col6.metric("Últimos 7 días", stats.data.this_week)

    # Data Table
    st.subheader("Reservas")
    df = bookings_dataframe(bookings.data or []) if bookings.success else None
    if df is not None and not df.empty:
        st.dataframe(
            df,
            use_container_width=True,
            column_config={
                "created_at": st.column_config.DatetimeColumn("Creada", format="D.M.YYYY HH:mm"),
                "date_time": st.column_config.DatetimeColumn("Horario", format="D.M.YYYY HH:mm"),
                "service": "Servicio",
                "status": "Estado",
                "user_id": "Usuario",
                "id": "ID"
            }
        )
    else:
        st.info("Todavía no hay reservas.")

    # Footer
    st.markdown("---")
    st.caption("Odin Gym • Sistema de reservas")

if __name__ == "__main__":
    main()
