# file: send_sample_report.py

import requests
import random

# URL of the running service
url = "http://localhost:8000"
headers = {"Content-Type" : "application/json"}

# Starting values in realistic indoor ranges
co2 = random.uniform(450.0, 1200.0)  # ppm
pm25 = random.uniform(2.0, 40.0)  # µg/m³
humidity = random.uniform(30.0, 60.0)  # %

# Same layout as the sensor's web page: name, tab, value, unit
report = "\n".join([
    f"CO2\t{co2:.0f} ppm",
    f"DPS310 Pressure\t{random.uniform(990.0, 1030.0):.1f} hPa",
    f"PM <1µm Weight concentration\t{pm25 * 0.6:.1f} µg/m³",
    f"PM <2.5µm Weight concentration\t{pm25:.1f} µg/m³",
    f"PM <4µm Weight concentration\t{pm25 * 1.1:.1f} µg/m³",
    f"PM <10µm Weight concentration\t{pm25 * 1.3:.1f} µg/m³",
    f"RSSI\t{random.randint(-85, -45)} dBm",
    f"SEN55 Humidity\t{humidity:.1f} %",
    f"SEN55 NOX\t{random.randint(1, 3)}",
    f"SEN55 Temperature\t{random.uniform(18.0, 26.0):.1f} °C",
    f"SEN55 VOC\t{random.randint(60, 220)}",
    f"Uptime\t{random.randint(60, 90000)} s",
    "VOC Quality\tNormal",
])

try :
    response = requests.post(f"{url}/parse", headers = headers, json = {"text" : report})
    if response.status_code != 200 :
        print(f"Parse failed: {response.status_code} - {response.text}")
    else :
        data = response.json()["data"]
        response = requests.post(f"{url}/readings", headers = headers, json = {"data" : data, "room" : "Sample"})
        if response.status_code == 200 :
            result = response.json()
            print(f"Reading {result['reading']['id']} stored, history size {result['history_size']}: {data}")
        else :
            print(f"Save failed: {response.status_code} - {response.text}")
except requests.exceptions.RequestException as e :
    print(f"Request failed: {e}")
