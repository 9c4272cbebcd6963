import json
import os
import re
from datetime import datetime, timezone
from html import escape
from typing import Any, Dict, List, Optional

from gymbooking.content.definitions import PLANES, SERVICIOS
from gymbooking.core.logger import logger

SERVICES_MARKERS = ("<!-- SERVICES:START -->", "<!-- SERVICES:END -->")
PLANS_MARKERS = ("<!-- PLANS:START -->", "<!-- PLANS:END -->")

def format_clp(amount: int) -> str:
    """16000 -> '16.000' (es-CL thousands separator)."""
    return f"{amount:,}".replace(",", ".")

def generate_services_html(servicios: Optional[List[Dict[str, Any]]] = None) -> str:
    servicios = SERVICIOS if servicios is None else servicios
    cards = []
    for servicio in servicios:
        cards.append(f"""
    <div class="bg-white rounded-lg shadow-xl overflow-hidden hover:shadow-2xl transition-shadow">
      <div class="h-48 bg-gradient-to-br {escape(servicio['color'])} flex items-center justify-center">
        <i class="fas {escape(servicio['icono'])} text-6xl {escape(servicio['textoIcono'])}"></i>
      </div>
      <div class="p-6">
        <h3 class="font-bold text-2xl mb-3">{escape(servicio['nombre'])}</h3>
        <p class="text-gray-700 mb-4">{escape(servicio['descripcion'])}</p>
        <a href="#contacto" class="text-secondary-red font-bold hover:underline">
          Más información <i class="fas fa-arrow-right ml-1"></i>
        </a>
      </div>
    </div>
  """)
    return "\n".join(cards)

def _plan_html(plan: Dict[str, Any]) -> str:
    color = escape(plan["color"])
    gold = plan["color"] == "primary-gold"

    card_class = f"border-2 border-{color} relative" if plan.get("destacado") else f"border-2 border-{color}"

    badge = ""
    if plan.get("etiqueta"):
        badge = f"""
      <div class="absolute top-0 right-0 bg-{color} {'text-bg-dark' if gold else 'text-white'} px-4 py-1 rounded-bl-lg font-bold">
        {escape(plan['etiqueta'])}
      </div>
    """

    saving = ""
    if plan.get("ahorro"):
        saving = f"""
      <p class="text-sm text-gray-600">Ahorra ${format_clp(plan['ahorro'])} al año</p>
    """

    benefits = "\n".join(f"""
            <li class="flex items-start">
              <i class="fas fa-check text-{color} mr-2 mt-1"></i>
              <span>{escape(beneficio)}</span>
            </li>
          """ for beneficio in plan["beneficios"])

    return f"""
      <div class="bg-white rounded-lg shadow-xl p-8 {card_class}">
        {badge}
        <div class="text-center mb-6">
          <i class="fas {escape(plan['icono'])} text-5xl text-{color} mb-4"></i>
          <h3 class="font-syncopate text-2xl font-bold mb-2">{escape(plan['nombre'])}</h3>
          <div class="text-4xl font-bold text-bg-dark mb-2">
            ${format_clp(plan['precio'])}<span class="text-lg text-gray-600">/{escape(plan['periodo'])}</span>
          </div>
          {saving}
        </div>
        <ul class="space-y-3 mb-6">
          {benefits}
        </ul>
        <a href="#contacto" class="btn-{'primary' if gold else 'secondary-red'} w-full text-center block">
          Contratar Plan
        </a>
      </div>
    """

def generate_plans_html(planes: Optional[List[Dict[str, Any]]] = None) -> str:
    planes = PLANES if planes is None else planes
    return "\n".join(_plan_html(plan) for plan in planes)

def replace_block(html: str, markers: tuple, content: str) -> str:
    """Replaces whatever sits between the two marker comments. No markers -> unchanged."""
    start, end = markers
    pattern = re.compile(re.escape(start) + r".*?" + re.escape(end), re.DOTALL)
    if not pattern.search(html):
        return html
    return pattern.sub(lambda _: f"{start}\n{content}\n{end}", html, count=1)

def update_index_html(html: str, services_html: Optional[str] = None, plans_html: Optional[str] = None) -> str:
    html = replace_block(html, SERVICES_MARKERS, services_html if services_html is not None else generate_services_html())
    return replace_block(html, PLANS_MARKERS, plans_html if plans_html is not None else generate_plans_html())

def build_snapshot(now: Optional[datetime] = None) -> Dict[str, Any]:
    return {
        "servicios": SERVICIOS,
        "planes": PLANES,
        "actualizado": (now or datetime.now(timezone.utc)).isoformat(),
    }

def export_snapshot(path: str, now: Optional[datetime] = None) -> Dict[str, Any]:
    data = build_snapshot(now)
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)
    logger.info(f"💾 Data exported to {path}")
    return data

def update_content(index_path: str, snapshot_path: str) -> bool:
    """
    Regenerates the marked sections of index.html (when present) and writes
    the JSON snapshot. Returns True if index.html was rewritten.
    """
    logger.info("🚀 Updating services and plans...")
    changed = False

    if os.path.exists(index_path):
        with open(index_path, "r", encoding="utf-8") as f:
            html = f.read()
        updated = update_index_html(html)
        if updated != html:
            with open(index_path, "w", encoding="utf-8") as f:
                f.write(updated)
            changed = True
            logger.info(f"✅ {index_path} updated")
        else:
            logger.info(f"ℹ️ {index_path} has no content markers, left untouched")
    else:
        logger.warning(f"⚠️ {index_path} not found, only exporting the snapshot")

    logger.info(f"📊 Total services: {len(SERVICIOS)}")
    logger.info(f"💰 Total plans: {len(PLANES)}")

    export_snapshot(snapshot_path)
    return changed
