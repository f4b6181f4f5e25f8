"""出厂默认配置

搜索组件的完整默认配置树，按控制面板标签页分段。
"""

import copy
from typing import Any, Dict

FACTORY_DEFAULTS: Dict[str, Any] = {
    # 常规
    "autoHide": {
        "mobile": False,
        "desktop": False,
    },
    "mobileBreakpoint": 768,
    "minSearchChars": 2,
    "minSearchLength": 2,
    "elementTriggering": {
        "initialDelay": 300,
        "maxRetries": 3,
        "retryInterval": 300,
        "maxRetryInterval": 1000,
        "baseRetryInterval": 300,
    },
    "maxResults": 20,
    "debugMode": False,
    "showHotspots": True,
    "showMedia": True,
    "showPanoramas": True,
    "searchInHotspotTitles": True,
    "searchInMediaTitles": True,
    "searchInPanoramaTitles": True,
    "searchInHotspotDescriptions": False,
    "searchInMediaDescriptions": False,

    "searchBar": {
        "placeholder": "Search... Type * for all",
        "width": 350,
        "position": {
            "top": 70,
            "right": 70,
            "left": None,
            "bottom": None,
        },
        "useResponsive": True,
        "mobilePosition": {
            "top": 60,
            "left": 20,
            "right": 20,
            "bottom": "auto",
        },
        "mobileOverrides": {
            "enabled": True,
            "breakpoint": 768,
            "width": "90%",
            "maxWidth": 350,
            "visibility": {
                "behavior": "dynamic",
                "showOnScroll": True,
                "hideThreshold": 100,
            },
        },
    },

    # 外观
    "appearance": {
        "searchField": {
            "borderRadius": {
                "topLeft": 35,
                "topRight": 35,
                "bottomRight": 35,
                "bottomLeft": 35,
            },
            "typography": {
                "fontSize": "16px",
                "fontFamily": "-apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Arial, sans-serif",
                "fontWeight": "400",
                "fontStyle": "normal",
                "lineHeight": "1.5",
                "letterSpacing": "0px",
                "textTransform": "none",
                "placeholder": {
                    "fontSize": "16px",
                    "fontWeight": "400",
                    "fontStyle": "italic",
                    "opacity": 0.7,
                    "letterSpacing": "0px",
                    "textTransform": "none",
                },
                "focus": {
                    "fontSize": "16px",
                    "fontWeight": "400",
                    "letterSpacing": "0.25px",
                },
            },
        },
        "searchResults": {
            "borderRadius": {
                "topLeft": 5,
                "topRight": 5,
                "bottomRight": 5,
                "bottomLeft": 5,
            },
        },
        "colors": {
            "searchBackground": "#f4f3f2",
            "searchText": "#1a1a1a",
            "placeholderText": "#94a3b8",
            "searchIcon": "#94a3b8",
            "clearIcon": "#94a3b8",
            "resultsBackground": "#ffffff",
            "groupHeaderBackground": "#ffffff",
            "groupHeaderColor": "#20293A",
            "groupCountColor": "#94a3b8",
            "resultHover": "#f0f0f0",
            "resultBorderLeft": "#ebebeb",
            "resultText": "#1e293b",
            "resultSubtitle": "#64748b",
            "resultIconColor": "#6e85f7",
            "resultSubtextColor": "#000000",
            "tagBackground": "#e0f2fe",
            "tagText": "#0369a1",
            "tagBorder": "#0891b2",
            "highlightBackground": "#ffff00",
            "highlightBackgroundOpacity": 0.5,
            "highlightText": "#000000",
            "highlightWeight": "bold",
        },
        "tags": {
            "borderRadius": 16,
            "fontSize": "11px",
            "padding": "3px 10px",
            "margin": "2px",
            "fontWeight": "600",
            "textTransform": "uppercase",
            "showBorder": True,
            "borderWidth": "1px",
        },
    },

    # 显示
    "display": {
        "showGroupHeaders": True,
        "showGroupCount": True,
        "showIconsInResults": True,
        "showTagsInResults": True,
        "showSubtitlesInResults": True,
        "showParentInfo": True,
    },
    "thumbnailSettings": {
        "enableThumbnails": False,
        "thumbnailSize": "48px",
        "borderRadius": 4,
        "borderWidth": 4,
        "borderColor": "#9CBBFF",
        "defaultImagePath": "assets/default-thumbnail.jpg",
        "defaultImages": {
            "Panorama": "assets/default-thumbnail.jpg",
            "Hotspot": "assets/hotspot-default.jpg",
            "Polygon": "assets/polygon-default.jpg",
            "Video": "assets/video-default.jpg",
            "Webframe": "assets/webframe-default.jpg",
            "Image": "assets/image-default.jpg",
            "Text": "assets/text-default.jpg",
            "ProjectedImage": "assets/projected-image-default.jpg",
            "Element": "assets/element-default.jpg",
            "3DModel": "assets/3d-model-default.jpg",
            "3DHotspot": "assets/3d-hotspot-default.jpg",
            "3DModelObject": "assets/3d-model-object-default.jpg",
            "default": "assets/default-thumbnail.jpg",
        },
        "groupHeaderAlignment": "left",
        "groupHeaderPosition": "top",
        "iconSettings": {
            "enableCustomIcons": False,
            "enableFontAwesome": False,
            "fontAwesomeUrl": "https://cdnjs.cloudflare.com/ajax/libs/font-awesome/6.4.0/css/all.min.css",
            "iconSize": "24px",
            "iconColor": "#3b82f6",
            "iconOpacity": 0.9,
            "iconAlignment": "left",
            "iconMargin": 12,
            "iconBorderRadius": 6,
            "enableIconHover": True,
            "iconHoverScale": 1.15,
            "iconHoverOpacity": 1.0,
            "customIcons": {
                "Panorama": "fas fa-home",
                "Hotspot": "fas fa-laptop",
                "Polygon": "fas fa-diamond",
                "Video": "fas fa-video",
                "Webframe": "fas fa-laptop",
                "Image": "fas fa-image",
                "Text": "fas fa-file-alt",
                "ProjectedImage": "fas fa-desktop",
                "Element": "fas fa-circle",
                "3DHotspot": "fas fa-gamepad",
                "Container": "fas fa-window-restore",
                "3DModel": "fas fa-cube",
                "3DModelObject": "fas fa-wrench",
                "default": "fas fa-circle",
            },
            "fallbackSettings": {
                "useDefaultOnError": True,
                "hideIconOnError": False,
                "showTypeLabel": False,
            },
        },
    },
    "displayLabels": {
        "Panorama": "Panorama",
        "Hotspot": "Hotspot",
        "Polygon": "Polygon",
        "Video": "Video",
        "Webframe": "Webframe",
        "Image": "Image",
        "Text": "Text",
        "ProjectedImage": "Projected Image",
        "Element": "Element",
        "3DHotspot": "3D Hotspot",
        "3DModel": "3D Model",
        "3DModelObject": "3D Model Object",
        "Container": "Container",
    },
    "useAsLabel": {
        "subtitles": True,
        "tags": True,
        "elementType": False,
        "parentWithType": False,
        "customText": "[Unnamed Item]",
    },

    # 内容
    "includeContent": {
        "containerSearch": {
            "enableContainerSearch": True,
            "containerNames": [],
        },
        "elements": {
            "includePanoramas": True,
            "includeHotspots": True,
            "includePolygons": True,
            "includeVideos": True,
            "includeWebframes": True,
            "includeImages": True,
            "includeText": True,
            "includeProjectedImages": True,
            "includeElements": True,
            "include3DModels": True,
            "include3DHotspots": True,
            "include3DModelObjects": True,
            "includeContainers": True,
        },
        "searchableProperties": {
            "title": True,
            "description": True,
            "subtitle": True,
            "tags": True,
            "customProperties": [],
        },
    },

    # 过滤
    "filter": {
        "mode": "none",
        "allowedValues": [],
        "blacklistedValues": [],
        "valueMatchMode": {
            "whitelist": "exact",
            "blacklist": "contains",
        },
        "mediaIndexes": {
            "mode": "none",
            "allowed": [],
            "blacklisted": [],
        },
        "elementTypes": {
            "mode": "none",
            "allowedTypes": [],
            "blacklistedTypes": [],
        },
        "elementLabels": {
            "mode": "none",
            "allowedValues": [],
            "blacklistedValues": [],
        },
        "tagFiltering": {
            "mode": "none",
            "allowedTags": [],
            "blacklistedTags": [],
        },
    },

    # 数据源
    "googleSheets": {
        "useGoogleSheetData": False,
        "includeStandaloneEntries": False,
        "useAsDataSource": True,
        "fetchMode": "csv",
        "googleSheetUrl": "",
        "useLocalCSV": False,
        "localCSVFile": "search-data.csv",
        "localCSVDir": "business-data",
        "localCSVUrl": "",
        "csvOptions": {
            "header": True,
            "skipEmptyLines": True,
            "dynamicTyping": True,
        },
        "caching": {
            "enabled": False,
            "timeoutMinutes": 60,
            "storageKey": "tourGoogleSheetsData",
        },
        "progressiveLoading": {
            "enabled": False,
            "initialFields": [],
            "detailFields": [],
        },
    },

    # 高级
    "searchSettings": {
        "debounce": 300,
        "maxResults": 50,
        "caseSensitive": False,
        "fuzzySearch": {
            "enabled": False,
            "threshold": 0.3,
        },
        "highlightMatches": True,
        "fieldWeights": {
            "label": 1.0,
            "subtitle": 0.8,
            "tags": 0.6,
            "parentLabel": 0.3,
        },
        "behavior": {
            "threshold": 0.4,
            "distance": 40,
            "minMatchCharLength": 1,
            "useExtendedSearch": True,
            "ignoreLocation": True,
            "includeScore": True,
        },
        "boostValues": {
            "sheetsMatch": 2.5,
            "labeledItem": 1.5,
            "unlabeledItem": 1.0,
            "childElement": 0.8,
        },
    },
    "animations": {
        "enabled": False,
        "duration": {
            "fast": 150,
            "normal": 250,
            "slow": 400,
        },
        "easing": "ease-out",
        "searchBar": {
            "openDuration": 300,
            "closeDuration": 200,
            "scaleEffect": True,
        },
        "results": {
            "fadeInDuration": 200,
            "slideDistance": 8,
            "staggerDelay": 30,
        },
        "reducedMotion": {
            "respectPreference": True,
            "fallbackDuration": 80,
        },
    },
}


def factory_defaults() -> Dict[str, Any]:
    """返回出厂默认配置的深拷贝"""
    return copy.deepcopy(FACTORY_DEFAULTS)
