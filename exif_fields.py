#!/usr/bin/env python3
"""
EXIF Fields
Field-name constants and the tag-id to field-name tables for each directory kind
"""

# Unknown tags are named with this prefix followed by the hex tag id
UNKNOWN_PREFIX = 'UnknownTag_'

# IFD0 / thumbnail image structure
IMAGE_WIDTH = 'ImageWidth'
IMAGE_LENGTH = 'ImageLength'
BITS_PER_SAMPLE = 'BitsPerSample'
COMPRESSION = 'Compression'
PHOTOMETRIC_INTERPRETATION = 'PhotometricInterpretation'
ORIENTATION = 'Orientation'
SAMPLES_PER_PIXEL = 'SamplesPerPixel'
PLANAR_CONFIGURATION = 'PlanarConfiguration'
YCBCR_SUB_SAMPLING = 'YCbCrSubSampling'
YCBCR_POSITIONING = 'YCbCrPositioning'
X_RESOLUTION = 'XResolution'
Y_RESOLUTION = 'YResolution'
RESOLUTION_UNIT = 'ResolutionUnit'
SUBFILE_TYPE = 'SubfileType'
STRIP_OFFSETS = 'StripOffsets'
STRIP_BYTE_COUNTS = 'StripByteCounts'
ROWS_PER_STRIP = 'RowsPerStrip'

# IFD0 descriptive
DATE_TIME = 'DateTime'
IMAGE_DESCRIPTION = 'ImageDescription'
MAKE = 'Make'
MODEL = 'Model'
SOFTWARE = 'Software'
ARTIST = 'Artist'
COPYRIGHT = 'Copyright'
RATING = 'Rating'
HOST_COMPUTER = 'HostComputer'
DNG_VERSION = 'DNGVersion'
UNIQUE_CAMERA_MODEL = 'UniqueCameraModel'

# Preview stored in IFD0 by most raw formats
PREVIEW_IMAGE_START = 'PreviewImageStart'
PREVIEW_IMAGE_LENGTH = 'PreviewImageLength'

# Pointers
EXIF_IFD_POINTER = 'ExifIFDPointer'
GPS_INFO_IFD_POINTER = 'GPSInfoIFDPointer'
INTEROPERABILITY_IFD_POINTER = 'InteroperabilityIFDPointer'
SUB_IFDS_POINTER = 'SubIFDs'

EXIF_POINTER_TAG = 0x8769
GPS_POINTER_TAG = 0x8825
INTEROP_POINTER_TAG = 0xA005
SUB_IFDS_TAG = 0x014A

# Exif sub-IFD
EXIF_VERSION = 'ExifVersion'
FLASHPIX_VERSION = 'FlashpixVersion'
COLOR_SPACE = 'ColorSpace'
COMPONENTS_CONFIGURATION = 'ComponentsConfiguration'
COMPRESSED_BITS_PER_PIXEL = 'CompressedBitsPerPixel'
PIXEL_X_DIMENSION = 'PixelXDimension'
PIXEL_Y_DIMENSION = 'PixelYDimension'
MAKER_NOTE = 'MakerNote'
USER_COMMENT = 'UserComment'
RELATED_SOUND_FILE = 'RelatedSoundFile'
DATE_TIME_ORIGINAL = 'DateTimeOriginal'
DATE_TIME_DIGITIZED = 'DateTimeDigitized'
OFFSET_TIME = 'OffsetTime'
OFFSET_TIME_ORIGINAL = 'OffsetTimeOriginal'
OFFSET_TIME_DIGITIZED = 'OffsetTimeDigitized'
SUB_SEC_TIME = 'SubSecTime'
SUB_SEC_TIME_ORIGINAL = 'SubSecTimeOriginal'
SUB_SEC_TIME_DIGITIZED = 'SubSecTimeDigitized'
IMAGE_UNIQUE_ID = 'ImageUniqueID'
CAMERA_OWNER_NAME = 'CameraOwnerName'
BODY_SERIAL_NUMBER = 'BodySerialNumber'
LENS_SPECIFICATION = 'LensSpecification'
LENS_MAKE = 'LensMake'
LENS_MODEL = 'LensModel'
LENS_SERIAL_NUMBER = 'LensSerialNumber'

# Picture conditions
EXPOSURE_TIME = 'ExposureTime'
F_NUMBER = 'FNumber'
EXPOSURE_PROGRAM = 'ExposureProgram'
SPECTRAL_SENSITIVITY = 'SpectralSensitivity'
ISO_SPEED_RATINGS = 'ISOSpeedRatings'
OECF = 'OECF'
SENSITIVITY_TYPE = 'SensitivityType'
RECOMMENDED_EXPOSURE_INDEX = 'RecommendedExposureIndex'
SHUTTER_SPEED_VALUE = 'ShutterSpeedValue'
APERTURE_VALUE = 'ApertureValue'
BRIGHTNESS_VALUE = 'BrightnessValue'
EXPOSURE_BIAS_VALUE = 'ExposureBiasValue'
MAX_APERTURE_VALUE = 'MaxApertureValue'
SUBJECT_DISTANCE = 'SubjectDistance'
METERING_MODE = 'MeteringMode'
LIGHT_SOURCE = 'LightSource'
FLASH = 'Flash'
FOCAL_LENGTH = 'FocalLength'
SUBJECT_AREA = 'SubjectArea'
FLASH_ENERGY = 'FlashEnergy'
SPATIAL_FREQUENCY_RESPONSE = 'SpatialFrequencyResponse'
FOCAL_PLANE_X_RESOLUTION = 'FocalPlaneXResolution'
FOCAL_PLANE_Y_RESOLUTION = 'FocalPlaneYResolution'
FOCAL_PLANE_RESOLUTION_UNIT = 'FocalPlaneResolutionUnit'
SUBJECT_LOCATION = 'SubjectLocation'
EXPOSURE_INDEX = 'ExposureIndex'
SENSING_METHOD = 'SensingMethod'
FILE_SOURCE = 'FileSource'
SCENE_TYPE = 'SceneType'
CFA_PATTERN = 'CFAPattern'
CUSTOM_RENDERED = 'CustomRendered'
EXPOSURE_MODE = 'ExposureMode'
WHITE_BALANCE = 'WhiteBalance'
DIGITAL_ZOOM_RATIO = 'DigitalZoomRatio'
FOCAL_LENGTH_IN_35MM_FILM = 'FocalLengthIn35mmFilm'
SCENE_CAPTURE_TYPE = 'SceneCaptureType'
GAIN_CONTROL = 'GainControl'
CONTRAST = 'Contrast'
SATURATION = 'Saturation'
SHARPNESS = 'Sharpness'
DEVICE_SETTING_DESCRIPTION = 'DeviceSettingDescription'
SUBJECT_DISTANCE_RANGE = 'SubjectDistanceRange'

# Thumbnail (IFD1)
THUMB_COMPRESSION = 'ThumbCompression'
THUMB_JPEG_INTERCHANGE_FORMAT = 'ThumbJPEGInterchangeFormat'
THUMB_JPEG_INTERCHANGE_FORMAT_LENGTH = 'ThumbJPEGInterchangeFormatLength'

# GPS sub-IFD
GPS_VERSION_ID = 'GPSVersionID'
GPS_LATITUDE_REF = 'GPSLatitudeRef'
GPS_LATITUDE = 'GPSLatitude'
GPS_LONGITUDE_REF = 'GPSLongitudeRef'
GPS_LONGITUDE = 'GPSLongitude'
GPS_ALTITUDE_REF = 'GPSAltitudeRef'
GPS_ALTITUDE = 'GPSAltitude'
GPS_TIME_STAMP = 'GPSTimeStamp'
GPS_SATELLITES = 'GPSSatellites'
GPS_STATUS = 'GPSStatus'
GPS_MEASURE_MODE = 'GPSMeasureMode'
GPS_DOP = 'GPSDOP'
GPS_SPEED_REF = 'GPSSpeedRef'
GPS_SPEED = 'GPSSpeed'
GPS_TRACK_REF = 'GPSTrackRef'
GPS_TRACK = 'GPSTrack'
GPS_IMG_DIRECTION_REF = 'GPSImgDirectionRef'
GPS_IMG_DIRECTION = 'GPSImgDirection'
GPS_MAP_DATUM = 'GPSMapDatum'
GPS_DEST_LATITUDE_REF = 'GPSDestLatitudeRef'
GPS_DEST_LATITUDE = 'GPSDestLatitude'
GPS_DEST_LONGITUDE_REF = 'GPSDestLongitudeRef'
GPS_DEST_LONGITUDE = 'GPSDestLongitude'
GPS_DEST_BEARING_REF = 'GPSDestBearingRef'
GPS_DEST_BEARING = 'GPSDestBearing'
GPS_DEST_DISTANCE_REF = 'GPSDestDistanceRef'
GPS_DEST_DISTANCE = 'GPSDestDistance'
GPS_PROCESSING_METHOD = 'GPSProcessingMethod'
GPS_AREA_INFORMATION = 'GPSAreaInformation'
GPS_DATE_STAMP = 'GPSDateStamp'
GPS_DIFFERENTIAL = 'GPSDifferential'

# Interoperability sub-IFD
INTEROPERABILITY_INDEX = 'InteroperabilityIndex'
INTEROPERABILITY_VERSION = 'InteroperabilityVersion'
RELATED_IMAGE_FILE_FORMAT = 'RelatedImageFileFormat'
RELATED_IMAGE_WIDTH = 'RelatedImageWidth'
RELATED_IMAGE_LENGTH = 'RelatedImageLength'


# IFD0 and the Exif sub-IFD share one table
EXIF_FIELDS = {
    0x00FE: SUBFILE_TYPE,
    0x0100: IMAGE_WIDTH,
    0x0101: IMAGE_LENGTH,
    0x0102: BITS_PER_SAMPLE,
    0x0103: COMPRESSION,
    0x0106: PHOTOMETRIC_INTERPRETATION,
    0x0111: STRIP_OFFSETS,
    0x0112: ORIENTATION,
    0x0115: SAMPLES_PER_PIXEL,
    0x0116: ROWS_PER_STRIP,
    0x0117: STRIP_BYTE_COUNTS,
    0x011A: X_RESOLUTION,
    0x011B: Y_RESOLUTION,
    0x011C: PLANAR_CONFIGURATION,
    0x0128: RESOLUTION_UNIT,
    0x0201: PREVIEW_IMAGE_START,
    0x0202: PREVIEW_IMAGE_LENGTH,
    0x0212: YCBCR_SUB_SAMPLING,
    0x0213: YCBCR_POSITIONING,
    0x0132: DATE_TIME,
    0x010E: IMAGE_DESCRIPTION,
    0x010F: MAKE,
    0x0110: MODEL,
    0x0131: SOFTWARE,
    0x013B: ARTIST,
    0x013C: HOST_COMPUTER,
    0x4746: RATING,
    0x8298: COPYRIGHT,
    0xC612: DNG_VERSION,
    0xC614: UNIQUE_CAMERA_MODEL,
    SUB_IFDS_TAG: SUB_IFDS_POINTER,
    EXIF_POINTER_TAG: EXIF_IFD_POINTER,
    GPS_POINTER_TAG: GPS_INFO_IFD_POINTER,
    INTEROP_POINTER_TAG: INTEROPERABILITY_IFD_POINTER,

    0x9000: EXIF_VERSION,
    0xA000: FLASHPIX_VERSION,
    0xA001: COLOR_SPACE,
    0x9101: COMPONENTS_CONFIGURATION,
    0x9102: COMPRESSED_BITS_PER_PIXEL,
    0xA002: PIXEL_X_DIMENSION,
    0xA003: PIXEL_Y_DIMENSION,
    0x927C: MAKER_NOTE,
    0x9286: USER_COMMENT,
    0xA004: RELATED_SOUND_FILE,
    0x9003: DATE_TIME_ORIGINAL,
    0x9004: DATE_TIME_DIGITIZED,
    0x9010: OFFSET_TIME,
    0x9011: OFFSET_TIME_ORIGINAL,
    0x9012: OFFSET_TIME_DIGITIZED,
    0x9290: SUB_SEC_TIME,
    0x9291: SUB_SEC_TIME_ORIGINAL,
    0x9292: SUB_SEC_TIME_DIGITIZED,
    0xA420: IMAGE_UNIQUE_ID,
    0xA430: CAMERA_OWNER_NAME,
    0xA431: BODY_SERIAL_NUMBER,
    0xA432: LENS_SPECIFICATION,
    0xA433: LENS_MAKE,
    0xA434: LENS_MODEL,
    0xA435: LENS_SERIAL_NUMBER,

    0x829A: EXPOSURE_TIME,
    0x829D: F_NUMBER,
    0x8822: EXPOSURE_PROGRAM,
    0x8824: SPECTRAL_SENSITIVITY,
    0x8827: ISO_SPEED_RATINGS,
    0x8828: OECF,
    0x8830: SENSITIVITY_TYPE,
    0x8832: RECOMMENDED_EXPOSURE_INDEX,
    0x9201: SHUTTER_SPEED_VALUE,
    0x9202: APERTURE_VALUE,
    0x9203: BRIGHTNESS_VALUE,
    0x9204: EXPOSURE_BIAS_VALUE,
    0x9205: MAX_APERTURE_VALUE,
    0x9206: SUBJECT_DISTANCE,
    0x9207: METERING_MODE,
    0x9208: LIGHT_SOURCE,
    0x9209: FLASH,
    0x920A: FOCAL_LENGTH,
    0x9214: SUBJECT_AREA,
    0xA20B: FLASH_ENERGY,
    0xA20C: SPATIAL_FREQUENCY_RESPONSE,
    0xA20E: FOCAL_PLANE_X_RESOLUTION,
    0xA20F: FOCAL_PLANE_Y_RESOLUTION,
    0xA210: FOCAL_PLANE_RESOLUTION_UNIT,
    0xA214: SUBJECT_LOCATION,
    0xA215: EXPOSURE_INDEX,
    0xA217: SENSING_METHOD,
    0xA300: FILE_SOURCE,
    0xA301: SCENE_TYPE,
    0xA302: CFA_PATTERN,
    0xA401: CUSTOM_RENDERED,
    0xA402: EXPOSURE_MODE,
    0xA403: WHITE_BALANCE,
    0xA404: DIGITAL_ZOOM_RATIO,
    0xA405: FOCAL_LENGTH_IN_35MM_FILM,
    0xA406: SCENE_CAPTURE_TYPE,
    0xA407: GAIN_CONTROL,
    0xA408: CONTRAST,
    0xA409: SATURATION,
    0xA40A: SHARPNESS,
    0xA40B: DEVICE_SETTING_DESCRIPTION,
    0xA40C: SUBJECT_DISTANCE_RANGE,
}

THUMBNAIL_FIELDS = {
    0x0103: THUMB_COMPRESSION,
    0x0201: THUMB_JPEG_INTERCHANGE_FORMAT,
    0x0202: THUMB_JPEG_INTERCHANGE_FORMAT_LENGTH,
}

GPS_FIELDS = {
    0x0000: GPS_VERSION_ID,
    0x0001: GPS_LATITUDE_REF,
    0x0002: GPS_LATITUDE,
    0x0003: GPS_LONGITUDE_REF,
    0x0004: GPS_LONGITUDE,
    0x0005: GPS_ALTITUDE_REF,
    0x0006: GPS_ALTITUDE,
    0x0007: GPS_TIME_STAMP,
    0x0008: GPS_SATELLITES,
    0x0009: GPS_STATUS,
    0x000A: GPS_MEASURE_MODE,
    0x000B: GPS_DOP,
    0x000C: GPS_SPEED_REF,
    0x000D: GPS_SPEED,
    0x000E: GPS_TRACK_REF,
    0x000F: GPS_TRACK,
    0x0010: GPS_IMG_DIRECTION_REF,
    0x0011: GPS_IMG_DIRECTION,
    0x0012: GPS_MAP_DATUM,
    0x0013: GPS_DEST_LATITUDE_REF,
    0x0014: GPS_DEST_LATITUDE,
    0x0015: GPS_DEST_LONGITUDE_REF,
    0x0016: GPS_DEST_LONGITUDE,
    0x0017: GPS_DEST_BEARING_REF,
    0x0018: GPS_DEST_BEARING,
    0x0019: GPS_DEST_DISTANCE_REF,
    0x001A: GPS_DEST_DISTANCE,
    0x001B: GPS_PROCESSING_METHOD,
    0x001C: GPS_AREA_INFORMATION,
    0x001D: GPS_DATE_STAMP,
    0x001E: GPS_DIFFERENTIAL,
}

INTEROP_FIELDS = {
    0x0001: INTEROPERABILITY_INDEX,
    0x0002: INTEROPERABILITY_VERSION,
    0x1000: RELATED_IMAGE_FILE_FORMAT,
    0x1001: RELATED_IMAGE_WIDTH,
    0x1002: RELATED_IMAGE_LENGTH,
}


def unknown_field_name(tag_id: int) -> str:
    return f"{UNKNOWN_PREFIX}{tag_id:x}"
