"""
Per-category specification dictionaries.

Each category maps a semantic spec name to the pattern fragments that
mention it in a query. Fragments are regular expressions matched
against the lowercased query; a spec counts as mentioned when any of
its fragments is found.

Spec names double as the normalised specification keys the catalog
stores ("Refresh Rate" -> "refresh_rate").
"""

from types import MappingProxyType
from typing import Mapping, Tuple

from core.context import Category

SpecDictionary = Mapping[Category, Mapping[str, Tuple[str, ...]]]


SPEC_PATTERNS: SpecDictionary = MappingProxyType({
    Category.LAPTOPS: MappingProxyType({
        'processor': ('processor', r'\bcpu\b', r'\bintel\b', r'\bamd\b', r'\bryzen\b',
                      r'core i[3579]', r'\bm[123]\b', r'\bapple\b'),
        'ram': (r'\d+\s*gb\s*ram', r'\bmemory\b', r'\b\d+gb\b'),
        'storage': (r'\d+\s*tb\b', r'\d+\s*gb\s*ssd', r'\bssd\b', r'\bhdd\b'),
        'gpu': (r'\brtx\b', r'\bgtx\b', r'\bnvidia\b', r'\bradeon\b', r'intel iris',
                r'\bgpu\b', r'\bgraphics\b'),
        'display': (r'\boled\b', r'\bretina\b', r'\bips\b', r'\bqhd\b', r'\bfhd\b',
                    r'1080p', r'\b4k\b', r'\bdisplay\b', r'\bscreen\b'),
        'refresh_rate': (r'\b\d+\s*hz\b', r'\brefresh rate\b'),
        'battery_life': (r'\bbattery\b', r'\b\d+\s*hrs?\b', r'long battery', r'\bendurance\b'),
        'weight': (r'\blight\b', r'\bportable\b', r'\d+\.?\d*\s*kg\b', r'\blightweight\b'),
        'best_for': (r'\bgaming\b', r'\bprogramming\b', r'video editing', r'\boffice\b',
                     r'\bbusiness\b', r'\bcreative\b', r'\btravel\b', r'\bstudents?\b'),
    }),
    Category.SMARTPHONES: MappingProxyType({
        'processor': (r'\bsnapdragon\b', r'apple a\d+', r'\bprocessor\b', r'\bchip(?:set)?\b',
                      r'\bdimensity\b', r'\bgen\s*\d+\b'),
        'ram': (r'\d+\s*gb\s*ram', r'\b\d+gb\b', r'\bmemory\b'),
        'display': (r'\bamoled\b', r'\boled\b', r'\bretina\b', r'\bips\b', r'1080p',
                    r'\bdisplay\b'),
        'refresh_rate': (r'\b\d+\s*hz\b', r'\brefresh rate\b'),
        'rear_camera': (r'\b\d+\s*mp\b', r'\bcamera\b', r'\bmegapixels?\b'),
        'battery_capacity': (r'\b\d+\s*mah\b', r'\bbattery\b'),
        'charging': (r'\b\d+\s*w\b', r'fast charg(?:e|ing)', r'\bcharging\b', r'\bwatts?\b'),
        'network': (r'\b5g\b', r'\b4g\b', r'\bnetwork\b', r'\bconnectivity\b'),
        'water_resistance': (r'\bip\d{2}\b', r'\bwaterproof\b', r'water resistant'),
    }),
    Category.SMART_TVS: MappingProxyType({
        'display_size': (r'\b\d+\s*(?:inch|inches|")', r'\bscreen size\b'),
        'display_type': (r'\bled\b', r'\bqled\b', r'\boled\b', r'\buled\b'),
        'resolution': (r'\b4k\b', r'\b8k\b', r'\buhd\b', r'full hd', r'\bfhd\b'),
        'refresh_rate': (r'\b\d+\s*hz\b', r'\brefresh rate\b'),
        'gaming_mode': (r'\bgaming\b', r'\bgamer\b'),
        'voice_assistant': (r'\balexa\b', r'google assistant', r'\bvoice\b', r'\bsmart\b', r'\bai\b'),
        'sound_output': (r'\bdolby\b', r'\bsound\b', r'\bspeakers?\b', r'\b\d+\s*w\b'),
    }),
    Category.ACCESSORIES: MappingProxyType({
        'accessory_type': (r'\bearbuds\b', r'\bheadphones?\b', r'\bspeaker\b', r'\bcharger\b',
                           r'power bank', r'\bmouse\b', r'\bkeyboard\b', r'\bwebcam\b'),
        'connectivity': (r'\bwireless\b', r'\bbluetooth\b', r'\bwired\b', r'\blatency\b'),
        'battery_life': (r'\b\d+\s*hrs?\b', r'\bbattery\b', r'\bendurance\b', r'\b\d+\s*mah\b'),
        'noise_cancellation': (r'\banc\b', r'noise cancell?ation', r'\bearpads\b'),
        'water_resistance': (r'\bwaterproof\b', r'\bip[x\d]\d\b', r'water resistant'),
        'usage': (r'\bgaming\b', r'\boffice\b', r'\bcalls\b', r'\bmusic\b', r'\bmeetings\b'),
    }),
    Category.WEARABLES: MappingProxyType({
        'wearable_type': (r'\bsmartwatch(?:es)?\b', r'\bwatch(?:es)?\b', r'fitness band',
                          r'\bband\b', r'\btracker\b'),
        'display_type': (r'\boled\b', r'\bamoled\b', r'\blcd\b', r'\bretina\b'),
        'battery_life': (r'\b\d+\s*days?\b', r'\bbattery\b', r'\bendurance\b', r'\b\d+\s*hrs?\b'),
        'sports_modes': (r'\bsports?\b', r'\bworkouts?\b', r'\bmodes\b'),
        'health_tracking': (r'\bhealth\b', r'heart rate', r'\bspo2\b', r'blood oxygen',
                            r'step tracker', r'\bsleep\b'),
        'bluetooth_calling': (r'\bcalling\b', r'\bcalls?\b', r'\bvoice\b'),
    }),
})
