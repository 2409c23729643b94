#!/usr/bin/env python3
"""
Canon Lookup Tables
Lens types, model ids, camera-setting values and time zones found in Canon maker notes
"""

# Indices into the CameraSettings array
CONTINUOUS_DRIVE = 5
FOCUS_MODE = 7
RECORD_MODE = 9
METERING_MODE = 17
EXPOSURE_MODE = 20
LENS_TYPE = 22
AE_SETTING = 33

CONTINUOUS_DRIVE_VALUES = {
    0: 'Single',
    1: 'Continuous',
    2: 'Movie',
    3: 'Continuous, Speed Priority',
    4: 'Continuous, Low',
    5: 'Continuous, High',
    6: 'Silent Single',
    8: 'Continuous, High+',
    9: 'Single, Silent',
    10: 'Continuous, Silent',
}

FOCUS_MODE_VALUES = {
    0: 'One-shot AF',
    1: 'AI Servo AF',
    2: 'AI Focus AF',
    3: 'Manual Focus (3)',
    4: 'Single',
    5: 'Continuous',
    6: 'Manual Focus (6)',
    16: 'Pan Focus',
    256: 'One-shot AF (Live View)',
    257: 'AI Servo AF (Live View)',
    258: 'AI Focus AF (Live View)',
    512: 'Movie Snap Focus',
    519: 'Movie Servo AF',
}

RECORD_MODE_VALUES = {
    1: 'JPEG',
    2: 'CRW+THM',
    3: 'AVI+THM',
    4: 'TIF',
    5: 'TIF+JPEG',
    6: 'CR2',
    7: 'CR2+JPEG',
    9: 'MOV',
    10: 'MP4',
    11: 'CRM',
    12: 'CR3',
    13: 'CR3+JPEG',
    14: 'HIF',
    15: 'CR3+HIF',
}

METERING_MODE_VALUES = {
    0: 'Default',
    1: 'Spot',
    2: 'Average',
    3: 'Evaluative',
    4: 'Partial',
    5: 'Center-weighted average',
}

EXPOSURE_MODE_VALUES = {
    0: 'Easy',
    1: 'Program AE',
    2: 'Shutter speed priority AE',
    3: 'Aperture-priority AE',
    4: 'Manual',
    5: 'Depth-of-field AE',
    6: 'M-Dep',
    7: 'Bulb',
    8: 'Flexible-priority AE',
}

AE_SETTING_VALUES = {
    0: 'Normal AE',
    1: 'Exposure Compensation',
    2: 'AE Lock',
    3: 'AE Lock + Exposure Comp.',
    4: 'No AE',
}

CAMERA_SETTINGS_VALUES = {
    CONTINUOUS_DRIVE: CONTINUOUS_DRIVE_VALUES,
    FOCUS_MODE: FOCUS_MODE_VALUES,
    RECORD_MODE: RECORD_MODE_VALUES,
    METERING_MODE: METERING_MODE_VALUES,
    EXPOSURE_MODE: EXPOSURE_MODE_VALUES,
    AE_SETTING: AE_SETTING_VALUES,
}

LENS_TYPES = {
    1: 'Canon EF 50mm f/1.8',
    2: 'Canon EF 28mm f/2.8',
    3: 'Canon EF 135mm f/2.8 Soft',
    4: 'Canon EF 35-105mm f/3.5-4.5',
    5: 'Canon EF 35-70mm f/3.5-4.5',
    6: 'Canon EF 28-70mm f/3.5-4.5',
    7: 'Canon EF 100-300mm f/5.6L',
    8: 'Canon EF 100-300mm f/5.6',
    9: 'Canon EF 70-210mm f/4',
    10: 'Canon EF 50mm f/2.5 Macro',
    11: 'Canon EF 35mm f/2',
    13: 'Canon EF 15mm f/2.8 Fisheye',
    14: 'Canon EF 50-200mm f/3.5-4.5L',
    15: 'Canon EF 50-200mm f/3.5-4.5',
    16: 'Canon EF 35-135mm f/3.5-4.5',
    17: 'Canon EF 35-70mm f/3.5-4.5A',
    18: 'Canon EF 28-70mm f/3.5-4.5',
    20: 'Canon EF 100-200mm f/4.5A',
    21: 'Canon EF 80-200mm f/2.8L',
    22: 'Canon EF 20-35mm f/2.8L',
    23: 'Canon EF 35-105mm f/3.5-4.5',
    24: 'Canon EF 35-80mm f/4-5.6 Power Zoom',
    25: 'Canon EF 35-80mm f/4-5.6 Power Zoom',
    26: 'Canon EF 100mm f/2.8 Macro',
    27: 'Canon EF 35-80mm f/4-5.6',
    28: 'Canon EF 80-200mm f/4.5-5.6',
    29: 'Canon EF 50mm f/1.8 II',
    30: 'Canon EF 35-105mm f/4.5-5.6',
    31: 'Canon EF 75-300mm f/4-5.6',
    32: 'Canon EF 24mm f/2.8',
    35: 'Canon EF 35-80mm f/4-5.6',
    36: 'Canon EF 38-76mm f/4.5-5.6',
    37: 'Canon EF 35-80mm f/4-5.6',
    38: 'Canon EF 80-200mm f/4.5-5.6 II',
    39: 'Canon EF 75-300mm f/4-5.6',
    40: 'Canon EF 28-80mm f/3.5-5.6',
    41: 'Canon EF 28-90mm f/4-5.6',
    42: 'Canon EF 28-200mm f/3.5-5.6',
    43: 'Canon EF 28-105mm f/4-5.6',
    44: 'Canon EF 90-300mm f/4.5-5.6',
    45: 'Canon EF-S 18-55mm f/3.5-5.6 [II]',
    46: 'Canon EF 28-90mm f/4-5.6',
    48: 'Canon EF-S 18-55mm f/3.5-5.6 IS',
    49: 'Canon EF-S 55-250mm f/4-5.6 IS',
    50: 'Canon EF-S 18-200mm f/3.5-5.6 IS',
    51: 'Canon EF-S 18-135mm f/3.5-5.6 IS',
    52: 'Canon EF-S 18-55mm f/3.5-5.6 IS II',
    53: 'Canon EF-S 18-55mm f/3.5-5.6 III',
    54: 'Canon EF-S 55-250mm f/4-5.6 IS II',
    94: 'Canon TS-E 17mm f/4L',
    95: 'Canon TS-E 24mm f/3.5L II',
    124: 'Canon MP-E 65mm f/2.8 1-5x Macro Photo',
    125: 'Canon TS-E 24mm f/3.5L',
    126: 'Canon TS-E 45mm f/2.8',
    127: 'Canon TS-E 90mm f/2.8',
    129: 'Canon EF 300mm f/2.8L USM',
    130: 'Canon EF 50mm f/1.0L USM',
    131: 'Canon EF 28-80mm f/2.8-4L USM',
    132: 'Canon EF 1200mm f/5.6L USM',
    134: 'Canon EF 600mm f/4L IS USM',
    135: 'Canon EF 200mm f/1.8L USM',
    136: 'Canon EF 300mm f/2.8L USM',
    137: 'Canon EF 85mm f/1.2L USM',
    138: 'Canon EF 28-80mm f/2.8-4L',
    139: 'Canon EF 400mm f/2.8L USM',
    140: 'Canon EF 500mm f/4.5L USM',
    141: 'Canon EF 500mm f/4.5L USM',
    142: 'Canon EF 300mm f/2.8L IS USM',
    143: 'Canon EF 500mm f/4L IS USM',
    144: 'Canon EF 35-135mm f/4-5.6 USM',
    145: 'Canon EF 100-300mm f/4.5-5.6 USM',
    146: 'Canon EF 70-210mm f/3.5-4.5 USM',
    147: 'Canon EF 35-135mm f/4-5.6 USM',
    148: 'Canon EF 28-80mm f/3.5-5.6 USM',
    149: 'Canon EF 100mm f/2 USM',
    150: 'Canon EF 14mm f/2.8L USM',
    151: 'Canon EF 200mm f/2.8L USM',
    152: 'Canon EF 300mm f/4L IS USM',
    153: 'Canon EF 35-350mm f/3.5-5.6L USM',
    154: 'Canon EF 20mm f/2.8 USM',
    155: 'Canon EF 85mm f/1.8 USM',
    156: 'Canon EF 28-105mm f/3.5-4.5 USM',
    160: 'Canon EF 20-35mm f/3.5-4.5 USM',
    161: 'Canon EF 28-70mm f/2.8L USM',
    162: 'Canon EF 200mm f/2.8L USM',
    163: 'Canon EF 300mm f/4L',
    164: 'Canon EF 400mm f/5.6L',
    165: 'Canon EF 70-200mm f/2.8L USM',
    166: 'Canon EF 70-200mm f/2.8L USM + 1.4x',
    167: 'Canon EF 70-200mm f/2.8L USM + 2x',
    168: 'Canon EF 28mm f/1.8 USM',
    169: 'Canon EF 17-35mm f/2.8L USM',
    170: 'Canon EF 200mm f/2.8L II USM',
    171: 'Canon EF 300mm f/4L USM',
    172: 'Canon EF 400mm f/5.6L USM',
    173: 'Canon EF 180mm Macro f/3.5L USM',
    174: 'Canon EF 135mm f/2L USM',
    175: 'Canon EF 400mm f/2.8L USM',
    176: 'Canon EF 24-85mm f/3.5-4.5 USM',
    177: 'Canon EF 300mm f/4L IS USM',
    178: 'Canon EF 28-135mm f/3.5-5.6 IS',
    179: 'Canon EF 24mm f/1.4L USM',
    180: 'Canon EF 35mm f/1.4L USM',
    181: 'Canon EF 100-400mm f/4.5-5.6L IS USM + 1.4x',
    182: 'Canon EF 100-400mm f/4.5-5.6L IS USM + 2x',
    183: 'Canon EF 100-400mm f/4.5-5.6L IS USM',
    184: 'Canon EF 400mm f/2.8L USM + 2x',
    185: 'Canon EF 600mm f/4L IS USM',
    186: 'Canon EF 70-200mm f/4L USM',
    187: 'Canon EF 70-200mm f/4L USM + 1.4x',
    188: 'Canon EF 70-200mm f/4L USM + 2x',
    189: 'Canon EF 70-200mm f/4L USM + 2.8x',
    190: 'Canon EF 100mm f/2.8 Macro USM',
    191: 'Canon EF 400mm f/4 DO IS',
    193: 'Canon EF 35-80mm f/4-5.6 USM',
    194: 'Canon EF 80-200mm f/4.5-5.6 USM',
    195: 'Canon EF 35-105mm f/4.5-5.6 USM',
    196: 'Canon EF 75-300mm f/4-5.6 USM',
    197: 'Canon EF 75-300mm f/4-5.6 IS USM',
    198: 'Canon EF 50mm f/1.4 USM',
    199: 'Canon EF 28-80mm f/3.5-5.6 USM',
    200: 'Canon EF 75-300mm f/4-5.6 USM',
    201: 'Canon EF 28-80mm f/3.5-5.6 USM',
    202: 'Canon EF 28-80mm f/3.5-5.6 USM IV',
    208: 'Canon EF 22-55mm f/4-5.6 USM',
    209: 'Canon EF 55-200mm f/4.5-5.6',
    210: 'Canon EF 28-90mm f/4-5.6 USM',
    211: 'Canon EF 28-200mm f/3.5-5.6 USM',
    212: 'Canon EF 28-105mm f/4-5.6 USM',
    213: 'Canon EF 90-300mm f/4.5-5.6 USM',
    214: 'Canon EF-S 18-55mm f/3.5-5.6 USM',
    215: 'Canon EF 55-200mm f/4.5-5.6 II USM',
    224: 'Canon EF 70-200mm f/2.8L IS USM',
    225: 'Canon EF 70-200mm f/2.8L IS USM + 1.4x',
    226: 'Canon EF 70-200mm f/2.8L IS USM + 2x',
    227: 'Canon EF 70-200mm f/2.8L IS USM + 2.8x',
    228: 'Canon EF 28-105mm f/3.5-4.5 USM',
    229: 'Canon EF 16-35mm f/2.8L USM',
    230: 'Canon EF 24-70mm f/2.8L USM',
    231: 'Canon EF 17-40mm f/4L USM',
    232: 'Canon EF 70-300mm f/4.5-5.6 DO IS USM',
    233: 'Canon EF 28-300mm f/3.5-5.6L IS USM',
    234: 'Canon EF-S 17-85mm f/4-5.6 IS USM',
    235: 'Canon EF-S 10-22mm f/3.5-4.5 USM',
    236: 'Canon EF-S 60mm f/2.8 Macro USM',
    237: 'Canon EF 24-105mm f/4L IS USM',
    238: 'Canon EF 70-300mm f/4-5.6 IS USM',
    239: 'Canon EF 85mm f/1.2L II USM',
    240: 'Canon EF-S 17-55mm f/2.8 IS USM',
    241: 'Canon EF 50mm f/1.2L USM',
    242: 'Canon EF 70-200mm f/4L IS USM',
    243: 'Canon EF 70-200mm f/4L IS USM + 1.4x',
    244: 'Canon EF 70-200mm f/4L IS USM + 2x',
    245: 'Canon EF 70-200mm f/4L IS USM + 2.8x',
    246: 'Canon EF 16-35mm f/2.8L II USM',
    247: 'Canon EF 14mm f/2.8L II USM',
    248: 'Canon EF 200mm f/2L IS USM',
    249: 'Canon EF 800mm f/5.6L IS USM',
    250: 'Canon EF 24mm f/1.4L II USM',
    251: 'Canon EF 70-200mm f/2.8L IS II USM',
    252: 'Canon EF 70-200mm f/2.8L IS II USM + 1.4x',
    253: 'Canon EF 70-200mm f/2.8L IS II USM + 2x',
    254: 'Canon EF 100mm f/2.8L Macro IS USM',
    488: 'Canon EF-S 15-85mm f/3.5-5.6 IS USM',
    489: 'Canon EF 70-300mm f/4-5.6L IS USM',
    490: 'Canon EF 8-15mm f/4L Fisheye USM',
    491: 'Canon EF 300mm f/2.8L IS II USM',
    492: 'Canon EF 400mm f/2.8L IS II USM',
    493: 'Canon EF 500mm f/4L IS II USM',
    494: 'Canon EF 600mm f/4L IS II USM',
    495: 'Canon EF 24-70mm f/2.8L II USM',
    496: 'Canon EF 200-400mm f/4L IS USM',
    499: 'Canon EF 200-400mm f/4L IS USM + 1.4x',
    502: 'Canon EF 28mm f/2.8 IS USM',
    503: 'Canon EF 24mm f/2.8 IS USM',
    504: 'Canon EF 24-70mm f/4L IS USM',
    505: 'Canon EF 35mm f/2 IS USM',
    506: 'Canon EF 400mm f/4 DO IS II USM',
    507: 'Canon EF 16-35mm f/4L IS USM',
    508: 'Canon EF 11-24mm f/4L USM',
    747: 'Canon EF 100-400mm f/4.5-5.6L IS II USM',
    748: 'Canon EF 100-400mm f/4.5-5.6L IS II USM + 1.4x',
    750: 'Canon EF 35mm f/1.4L II USM',
    751: 'Canon EF 16-35mm f/2.8L III USM',
    752: 'Canon EF 24-105mm f/4L IS II USM',
    753: 'Canon EF 85mm f/1.4L IS USM',
    754: 'Canon EF 70-200mm f/4L IS II USM',
    757: 'Canon EF 400mm f/2.8L IS III USM',
    758: 'Canon EF 600mm f/4L IS III USM',
    4142: 'Canon EF-S 18-135mm f/3.5-5.6 IS STM',
    4143: 'Canon EF-M 18-55mm f/3.5-5.6 IS STM',
    4144: 'Canon EF 40mm f/2.8 STM',
    4145: 'Canon EF-M 22mm f/2 STM',
    4146: 'Canon EF-S 18-55mm f/3.5-5.6 IS STM',
    4147: 'Canon EF-M 11-22mm f/4-5.6 IS STM',
    4148: 'Canon EF-S 55-250mm f/4-5.6 IS STM',
    4149: 'Canon EF-M 55-200mm f/4.5-6.3 IS STM',
    4150: 'Canon EF-S 10-18mm f/4.5-5.6 IS STM',
    4152: 'Canon EF 24-105mm f/3.5-5.6 IS STM',
    4153: 'Canon EF-M 15-45mm f/3.5-6.3 IS STM',
    4154: 'Canon EF-S 24mm f/2.8 STM',
    4155: 'Canon EF-M 28mm f/3.5 Macro IS STM',
    4156: 'Canon EF 50mm f/1.8 STM',
    4157: 'Canon EF-M 18-150mm f/3.5-6.3 IS STM',
    4158: 'Canon EF-S 18-55mm f/4-5.6 IS STM',
    4159: 'Canon EF-M 32mm f/1.4 STM',
    4160: 'Canon EF-S 35mm f/2.8 Macro IS STM',
    36910: 'Canon EF 70-300mm f/4-5.6 IS II USM',
    36912: 'Canon EF-S 18-135mm f/3.5-5.6 IS USM',
    61182: 'Canon RF lens',
    65535: 'n/a',
}

MODEL_IDS = {
    0x00000412: 'EOS M50 / Kiss M',
    0x00000801: 'PowerShot SX740 HS',
    0x00000804: 'PowerShot G5 X Mark II',
    0x00000805: 'PowerShot SX70 HS',
    0x00000808: 'PowerShot G7 X Mark III',
    0x00000811: 'EOS M6 Mark II',
    0x00000812: 'EOS M200',
    0x01010000: 'PowerShot A30',
    0x04040000: 'PowerShot G1',
    0x06040000: 'PowerShot S100 / Digital IXUS / IXY Digital',
    0x80000001: 'EOS-1D',
    0x80000167: 'EOS-1DS',
    0x80000168: 'EOS 10D',
    0x80000169: 'EOS-1D Mark III',
    0x80000170: 'EOS Digital Rebel / 300D / Kiss Digital',
    0x80000174: 'EOS-1D Mark II',
    0x80000175: 'EOS 20D',
    0x80000176: 'EOS Digital Rebel XSi / 450D / Kiss X2',
    0x80000188: 'EOS-1Ds Mark II',
    0x80000189: 'EOS Digital Rebel XT / 350D / Kiss Digital N',
    0x80000190: 'EOS 40D',
    0x80000213: 'EOS 5D',
    0x80000215: 'EOS-1Ds Mark III',
    0x80000218: 'EOS 5D Mark II',
    0x80000232: 'EOS-1D Mark II N',
    0x80000234: 'EOS 30D',
    0x80000236: 'EOS Digital Rebel XTi / 400D / Kiss Digital X',
    0x80000250: 'EOS 7D',
    0x80000252: 'EOS Rebel T1i / 500D / Kiss X3',
    0x80000254: 'EOS Rebel XS / 1000D / Kiss F',
    0x80000261: 'EOS 50D',
    0x80000269: 'EOS-1D X',
    0x80000270: 'EOS Rebel T2i / 550D / Kiss X4',
    0x80000281: 'EOS-1D Mark IV',
    0x80000285: 'EOS 5D Mark III',
    0x80000286: 'EOS Rebel T3i / 600D / Kiss X5',
    0x80000287: 'EOS 60D',
    0x80000288: 'EOS Rebel T3 / 1100D / Kiss X50',
    0x80000289: 'EOS 7D Mark II',
    0x80000301: 'EOS Rebel T4i / 650D / Kiss X6i',
    0x80000302: 'EOS 6D',
    0x80000324: 'EOS-1D C',
    0x80000325: 'EOS 70D',
    0x80000326: 'EOS Rebel T5i / 700D / Kiss X7i',
    0x80000327: 'EOS Rebel T5 / 1200D / Kiss X70 / Hi',
    0x80000328: 'EOS-1D X Mark II',
    0x80000331: 'EOS M',
    0x80000346: 'EOS Rebel SL1 / 100D / Kiss X7',
    0x80000347: 'EOS Rebel T6s / 760D / 8000D',
    0x80000349: 'EOS 5D Mark IV',
    0x80000350: 'EOS 80D',
    0x80000355: 'EOS M2',
    0x80000382: 'EOS 5DS',
    0x80000393: 'EOS Rebel T6i / 750D / Kiss X8i',
    0x80000401: 'EOS 5DS R',
    0x80000404: 'EOS Rebel T6 / 1300D / Kiss X80',
    0x80000405: 'EOS Rebel T7i / 800D / Kiss X9i',
    0x80000406: 'EOS 6D Mark II',
    0x80000408: 'EOS 77D / 9000D',
    0x80000417: 'EOS Rebel SL2 / 200D / Kiss X9',
    0x80000421: 'EOS R5',
    0x80000422: 'EOS Rebel T100 / 4000D / 3000D',
    0x80000424: 'EOS R',
    0x80000428: 'EOS-1D X Mark III',
    0x80000432: 'EOS Rebel T7 / 2000D / 1500D / Kiss X90',
    0x80000433: 'EOS RP',
    0x80000435: 'EOS Rebel T8i / 850D / X10i',
    0x80000436: 'EOS SL3 / 250D / Kiss X10',
    0x80000437: 'EOS 90D',
    0x80000450: 'EOS R3',
    0x80000453: 'EOS R6',
    0x80000464: 'EOS R7',
    0x80000465: 'EOS R10',
    0x80000468: 'EOS M50 Mark II / Kiss M2',
    0x80000480: 'EOS R50',
    0x80000481: 'EOS R6 Mark II',
    0x80000487: 'EOS R8',
    0x80000495: 'EOS R1',
    0x80000496: 'EOS R5 Mark II',
    0x80000498: 'EOS R100',
}

# TimeInfo[2] holds an index into this table
TIMEZONE_OFFSETS = {
    0: '+00:00',
    1: '+12:45',
    2: '+12:00',
    3: '+11:00',
    4: '+10:00',
    5: '+9:30',
    6: '+9:00',
    7: '+8:00',
    8: '+7:00',
    9: '+6:30',
    10: '+6:00',
    11: '+5:45',
    12: '+5:30',
    13: '+5:00',
    14: '+4:30',
    15: '+4:00',
    16: '+3:30',
    17: '+3:00',
    18: '+2:00',
    19: '+1:00',
    20: '+0:00',
    21: '-1:00',
    22: '-2:00',
    23: '-3:00',
    24: '-3:30',
    25: '-4:00',
    26: '-4:00',
    27: '-5:00',
    28: '-6:00',
    29: '-7:00',
    30: '-8:00',
    31: '-9:00',
    32: '-10:00',
    33: '-11:00',
    32766: '+00:00',
}

TIMEZONE_CITIES = {
    0: 'n/a',
    1: 'Chatham Islands',
    2: 'Wellington',
    3: 'Solomon Islands',
    4: 'Sydney',
    5: 'Adelaide',
    6: 'Tokyo',
    7: 'Hong Kong',
    8: 'Bangkok',
    9: 'Yangon',
    10: 'Dhaka',
    11: 'Kathmandu',
    12: 'Delhi',
    13: 'Karachi',
    14: 'Kabul',
    15: 'Dubai',
    16: 'Tehran',
    17: 'Moscow',
    18: 'Cairo',
    19: 'Paris',
    20: 'London',
    21: 'Azores',
    22: 'Fernando de Noronha',
    23: 'Sao Paulo',
    24: 'Newfoundland',
    25: 'Santiago',
    26: 'Caracas',
    27: 'New York',
    28: 'Chicago',
    29: 'Denver',
    30: 'Los Angeles',
    31: 'Anchorage',
    32: 'Honolulu',
    33: 'Samoa',
    32766: '(not set)',
}

AF_AREA_MODES = {
    0: 'Off (Manual Focus)',
    1: 'AF Point Expansion (surround)',
    2: 'Single-point AF',
    4: 'Auto',
    5: 'Face Detect AF',
    6: 'Face + Tracking',
    7: 'Zone AF',
    8: 'AF Point Expansion (4 point)',
    9: 'Spot AF',
    10: 'AF Point Expansion (8 point)',
    11: 'Flexizone Multi (49 point)',
    12: 'Flexizone Multi (9 point)',
    13: 'Flexizone Single',
    14: 'Large Zone AF',
}


def canon_lens(lens_type: int) -> str:
    """Lens name for a CameraSettings lens type, empty when unknown"""
    return LENS_TYPES.get(lens_type, '')


def canon_model(model_id: int) -> str:
    """Camera name for a ModelID value, empty when unknown"""
    return MODEL_IDS.get(model_id, '')


def camera_setting(index: int, value: int) -> str:
    return CAMERA_SETTINGS_VALUES.get(index, {}).get(value, '')
