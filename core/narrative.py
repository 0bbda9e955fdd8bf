"""
Geological advisory text for a scored point.

Presentation text only: a level-specific opening, a zone or terrain
detail, and a recommendation. Not part of the score.
"""

from core.models import RiskLevel

HIGH_OPENING = "ZONA RAWAN TINGGI"
MEDIUM_OPENING = "ZONA WASPADA"


def _high_risk_text(lat: float, lon: float) -> str:
    if lat > -7.60 and lon > 110.42:
        detail = "Lereng Merapi aktif. Evakuasi saat hujan deras, jauhi lembah sungai."
        advice = "Pemantauan intensif dan sistem peringatan dini."
    elif lat < -8.05 and lon > 110.45:
        detail = ("Pegunungan Baturagung dengan batuan kapur rawan longsor. "
                  "Hindari tebing curam saat hujan.")
        advice = "Stabilisasi lereng dan drainase yang baik."
    elif lon < 110.25:
        detail = "Perbukitan Menoreh dengan kondisi tanah labil."
        advice = "Penanaman vegetasi penguat lereng."
    else:
        detail = "Berdasarkan analisis data, area ini memiliki parameter risiko tinggi."
        advice = "Tindakan preventif segera dan pemantauan rutin."
    return f"{HIGH_OPENING} - {detail} Rekomendasi: {advice}"


def _medium_risk_text(slope: float, elevation: float) -> str:
    if slope > 15:
        detail = ("Kemiringan lahan cukup curam. Monitoring rutin diperlukan, "
                  "terutama musim hujan.")
        advice = "Evaluasi drainase dan vegetasi."
    elif elevation > 200:
        detail = "Area elevasi sedang dengan potensi gerakan tanah."
        advice = "Pemantauan perubahan kondisi lereng."
    else:
        detail = "Risiko sedang berdasarkan analisis."
        advice = "Evaluasi kondisi lahan secara berkala."
    return f"{MEDIUM_OPENING} - {detail} Rekomendasi: {advice}"


def _low_risk_text(slope: float, elevation: float) -> str:
    # Low-risk texts fold the recommendation into the closing sentence
    if elevation < 100 and slope < 5:
        return ("ZONA RELATIF AMAN - Dataran rendah dengan kemiringan landai. "
                "Risiko rendah, tetap waspada banjir.")
    if elevation < 150:
        return ("ZONA STABIL - Area dengan parameter relatif stabil. "
                "Tetap waspada perubahan kondisi saat hujan ekstrem.")
    return "ZONA AMAN - Analisis menunjukkan risiko rendah. Kondisi geologi relatif stabil."


def geological_risk(
    risk_level: RiskLevel,
    slope: float,
    elevation: float,
    lat: float,
    lon: float,
) -> str:
    """Advisory text for a risk level at a point."""
    if risk_level is RiskLevel.HIGH:
        return _high_risk_text(lat, lon)
    if risk_level is RiskLevel.MEDIUM:
        return _medium_risk_text(slope, elevation)
    return _low_risk_text(slope, elevation)
