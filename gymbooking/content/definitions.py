# Marketing catalog rendered into index.html by update_services.py

SERVICIOS = [
    {
        "id": "entrenamiento-personalizado",
        "nombre": "Entrenamiento Personalizado",
        "descripcion": "Sesiones one-on-one con entrenadores certificados. Planes adaptados a tus objetivos específicos.",
        "icono": "fa-dumbbell",
        "color": "from-primary-gold to-secondary-mustard",
        "textoIcono": "text-bg-dark"
    },
    {
        "id": "planes-gimnasio",
        "nombre": "Planes de Gimnasio",
        "descripcion": "Acceso ilimitado a nuestras instalaciones. Incluye plan estudiante con descuento especial.",
        "icono": "fa-calendar-alt",
        "color": "from-secondary-red to-secondary-red-bright",
        "textoIcono": "text-white"
    },
    {
        "id": "clases-grupales",
        "nombre": "Clases Grupales",
        "descripcion": "Strong Vikings, Power Jump, CrossFit. Ambiente motivador y comunitario.",
        "icono": "fa-users",
        "color": "from-primary-gold to-secondary-mustard",
        "textoIcono": "text-bg-dark"
    },
    {
        "id": "nutricionista",
        "nombre": "Nutricionista",
        "descripcion": "Asesoría nutricional personalizada para complementar tu entrenamiento y alcanzar tus metas.",
        "icono": "fa-apple-alt",
        "color": "from-secondary-red to-secondary-red-bright",
        "textoIcono": "text-white"
    },
    {
        "id": "kinesiologia",
        "nombre": "Kinesiología",
        "descripcion": "Rehabilitación y prevención de lesiones. Recupera y fortalece tu cuerpo.",
        "icono": "fa-heartbeat",
        "color": "from-primary-gold to-secondary-mustard",
        "textoIcono": "text-bg-dark"
    },
    {
        "id": "sistema-dj",
        "nombre": "Sistema DJ Personalizado",
        "descripcion": "Entrena con la mejor música. Ambiente energético único en la zona.",
        "icono": "fa-music",
        "color": "from-secondary-red to-secondary-red-bright",
        "textoIcono": "text-white"
    }
]

PLANES = [
    {
        "id": "plan-estudiante",
        "nombre": "Plan Estudiante",
        "precio": 16000,
        "periodo": "mes",
        "destacado": True,
        "etiqueta": "POPULAR",
        "icono": "fa-graduation-cap",
        "color": "primary-gold",
        "beneficios": [
            "Acceso ilimitado al gimnasio",
            "Horario extendido",
            "Descuento especial para estudiantes",
            "Sin permanencia"
        ]
    },
    {
        "id": "plan-anual-pac",
        "nombre": "Plan Anual PAC",
        "precio": 120000,
        "periodo": "año",
        "destacado": True,
        "etiqueta": "MEJOR VALOR",
        "icono": "fa-calendar-check",
        "color": "secondary-red",
        "ahorro": 72000,
        "beneficios": [
            "Acceso ilimitado 12 meses",
            "Sin cuota de inscripción",
            "Descuento del 37%",
            "Pago único o cuotas"
        ]
    },
    {
        "id": "clases-grupales",
        "nombre": "Clases Grupales",
        "precio": 30000,
        "periodo": "8 clases",
        "destacado": False,
        "icono": "fa-users",
        "color": "primary-gold",
        "beneficios": [
            "Strong Vikings",
            "Power Jump",
            "CrossFit",
            "Válido por 2 meses"
        ]
    }
]
