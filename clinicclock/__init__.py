# ClinicClock - Clinic attendance kiosk
