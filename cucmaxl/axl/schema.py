"""Ordered field descriptors for the AXL entities this package touches.

One schema per entity feeds both the `returnedTags` block of read operations
and the full field set of write operations. Field order follows the AXL XSD
sequence; read-only and write-only fields are interleaved so both renderings
keep that order.
"""
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional, Sequence, Union

from cucmaxl.axl.configs import PLACEHOLDER
from cucmaxl.axl.exceptions import TagNotValid
from cucmaxl.utils import Empty

READ = "r"
WRITE = "w"
BOTH = "rw"


@dataclass(frozen=True)
class Field:
    name: str
    default: Any = PLACEHOLDER
    attrs: tuple = ()
    write_attrs: Optional[tuple] = None
    children: tuple = ()
    mode: str = BOTH

    @property
    def readable(self) -> bool:
        return READ in self.mode

    @property
    def writable(self) -> bool:
        return WRITE in self.mode

    @property
    def attrs_for_write(self) -> tuple:
        return self.attrs if self.write_attrs is None else self.write_attrs


def leaf(name: str, default=PLACEHOLDER, mode=BOTH, attrs=()) -> Field:
    return Field(name, default=default, attrs=attrs, mode=mode)


def ref(name: str, default=PLACEHOLDER, mode=BOTH) -> Field:
    """A leaf naming another AXL object, carrying that object's uuid attribute."""
    return Field(name, default=default, attrs=("uuid",), mode=mode)


def group(name: str, *children: Field, attrs=(), write_attrs=None, mode=BOTH) -> Field:
    return Field(
        name, attrs=attrs, write_attrs=write_attrs, children=children, mode=mode
    )


def _text(value) -> Union[str, None]:
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _placeholder_attrs(attrs: Iterable[str]) -> dict:
    return {f"@{a}": PLACEHOLDER for a in attrs}


def _read_node(f: Field):
    if f.children:
        node = _placeholder_attrs(f.attrs)
        for child in f.children:
            if child.readable:
                node[child.name] = _read_node(child)
        return node
    if f.attrs:
        return {**_placeholder_attrs(f.attrs), "#text": PLACEHOLDER}
    return PLACEHOLDER


def _write_node(f: Field, value=Empty):
    attrs = _placeholder_attrs(f.attrs_for_write)

    if value is Empty:
        if f.children:
            node = attrs
            for child in f.children:
                if child.writable:
                    node[child.name] = _write_node(child)
            return node
        text = _text(f.default)
        return {**attrs, "#text": text} if attrs and text is not None else (attrs or text)

    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        return [_write_node(f, item) for item in value]
    if isinstance(value, Mapping):
        if not f.children:
            # already an xmltodict node, i.e. {"@uuid": "...", "#text": "..."}
            return {**attrs, **value}
        node = attrs
        known = set()
        for child in f.children:
            if child.writable:
                known.add(child.name)
                node[child.name] = _write_node(child, value.get(child.name, Empty))
        for k, v in value.items():
            if k not in known:
                node[k] = v
        return node

    text = _text(value)
    if attrs:
        return {**attrs, "#text": text}
    return text


@dataclass(frozen=True)
class EntitySchema:
    name: str
    fields: tuple
    tag_attrs: tuple = ("uuid",)
    key_tags: tuple = ("uuid",)

    @property
    def readable_tags(self) -> list[str]:
        return [f.name for f in self.fields if f.readable]

    @property
    def writable_tags(self) -> list[str]:
        return [f.name for f in self.fields if f.writable]

    def field(self, name: str) -> Optional[Field]:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def returned_tags(self, only: Optional[Sequence[str]] = None) -> dict:
        """Builds the `returnedTags` node, every readable field set to '?'.

        :param only: Restrict the tags to these top-level fields. None or an
            empty list means all of them. 'uuid' is always returned.
        :raises TagNotValid: when a tag in `only` is not a readable field
        """
        wanted = None
        if only:
            valid = self.readable_tags
            wanted = set()
            for tag in only:
                if tag == "uuid":
                    continue
                if tag not in valid:
                    raise TagNotValid(tag, valid, elem_name=self.name)
                wanted.add(tag)

        node = _placeholder_attrs(self.tag_attrs)
        for f in self.fields:
            if f.readable and (wanted is None or f.name in wanted):
                node[f.name] = _read_node(f)
        return node

    def write_fields(self, values: Optional[Mapping[str, Any]] = None) -> dict:
        """Renders every writable field, using `values` where given and the
        field default otherwise. Keys the schema doesn't know are appended
        unchanged after the known fields.

        :raises TagNotValid: when `values` holds one of the identifying
            `key_tags`, which only the operation's own arguments may set
        """
        if values is None:
            values = {}
        for tag in self.key_tags:
            if tag in values:
                raise TagNotValid(tag, self.writable_tags, elem_name=self.name)
        node = {}
        for f in self.fields:
            if f.writable:
                node[f.name] = _write_node(f, values.get(f.name, Empty))
        for k, v in values.items():
            if k not in node:
                node[k] = v
        return node


# ---------------------------------------------------------------------------
# Phones
# ---------------------------------------------------------------------------


def _phone_line_group(name: str, mode=BOTH) -> Field:
    return group(
        name,
        group(
            "line",
            leaf("index"),
            leaf("label"),
            leaf("display"),
            group("dirn", leaf("pattern"), ref("routePartitionName"), attrs=("uuid",)),
            leaf("ringSetting", "Ring"),
            leaf("consecutiveRingSetting", "Use System Default"),
            leaf("ringSettingIdlePickupAlert", "Use System Default", mode=WRITE),
            leaf("ringSettingActivePickupAlert", "Use System Default", mode=WRITE),
            leaf("displayAscii"),
            leaf("e164Mask"),
            leaf("mwlPolicy", "Use System Policy"),
            leaf("maxNumCalls", "2"),
            leaf("busyTrigger", "1"),
            group(
                "callInfoDisplay",
                leaf("callerName", "true"),
                leaf("callerNumber", "false"),
                leaf("redirectedNumber", "false"),
                leaf("dialedNumber", "true"),
            ),
            ref("recordingProfileName", mode=WRITE),
            ref("monitoringCssName", mode=WRITE),
            leaf("recordingFlag", "Call Recording Disabled", mode=WRITE),
            leaf("audibleMwi", "Default", mode=WRITE),
            leaf("speedDial", mode=WRITE),
            leaf("partitionUsage", "General", mode=WRITE),
            group("associatedEndusers", group("enduser", leaf("userId"))),
            leaf("missedCallLogging", "true", mode=WRITE),
            leaf("recordingMediaSource", "Gateway Preferred", mode=WRITE),
            attrs=("ctiid", "uuid"),
            write_attrs=("ctiid",),
        ),
        group("lineIdentifier", leaf("directoryNumber"), leaf("routePartitionName")),
        mode=mode,
    )


PHONE = EntitySchema(
    "phone",
    (
        leaf("name", mode=READ),
        leaf("newName", mode=WRITE),
        leaf("description"),
        leaf("product", mode=READ),
        leaf("model", mode=READ),
        leaf("class", mode=READ),
        leaf("protocol", mode=READ),
        ref("callingSearchSpaceName"),
        ref("devicePoolName"),
        ref("commonDeviceConfigName"),
        ref("commonPhoneConfigName"),
        leaf("networkLocation", "Use System Default"),
        ref("locationName"),
        ref("mediaResourceListName"),
        leaf("networkHoldMohAudioSourceId"),
        leaf("userHoldMohAudioSourceId"),
        leaf("loadInformation", attrs=("special",), mode=WRITE),
        leaf("vendorConfig", "", mode=WRITE),
        ref("securityProfileName"),
        ref("sipProfileName"),
        ref("geoLocationName", mode=READ),
        _phone_line_group("removeLines", mode=WRITE),
        _phone_line_group("addLines", mode=WRITE),
        _phone_line_group("lines"),
        leaf("numberOfButtons", mode=READ),
        ref("phoneTemplateName"),
        group("speeddials", group("speeddial", leaf("dirn"), leaf("label"), leaf("index"))),
        group(
            "busyLampFields",
            group(
                "busyLampField",
                leaf("blfDest"),
                leaf("blfDirn", mode=WRITE),
                leaf("routePartition", mode=WRITE),
                leaf("label"),
                group("associatedBlfSdFeatures", leaf("feature"), mode=WRITE),
                leaf("index"),
            ),
        ),
        ref("primaryPhoneName", mode=WRITE),
        leaf("ringSettingIdleBlfAudibleAlert", "Default", mode=WRITE),
        leaf("ringSettingBusyBlfAudibleAlert", "Default", mode=WRITE),
        group(
            "blfDirectedCallParks",
            group(
                "blfDirectedCallPark",
                leaf("label"),
                leaf("directedCallParkId"),
                group(
                    "directedCallParkDnAndPartition",
                    leaf("dnPattern"),
                    ref("routePartitionName"),
                ),
                leaf("index"),
            ),
            mode=WRITE,
        ),
        group(
            "addOnModules",
            group(
                "addOnModule",
                leaf("loadInformation", attrs=("special",)),
                leaf("model", "7914 14-Button Line Expansion Module"),
                leaf("index"),
            ),
            mode=WRITE,
        ),
        leaf("userLocale"),
        leaf("networkLocale"),
        leaf("idleTimeout"),
        leaf("authenticationUrl"),
        leaf("directoryUrl"),
        leaf("idleUrl"),
        leaf("informationUrl"),
        leaf("messagesUrl"),
        leaf("proxyServerUrl"),
        leaf("servicesUrl"),
        group(
            "services",
            group(
                "service",
                ref("telecasterServiceName"),
                leaf("name"),
                leaf("url"),
                leaf("urlButtonIndex", "0"),
                leaf("urlLabel"),
                leaf("serviceNameAscii"),
                leaf("phoneService", mode=READ),
                attrs=("uuid",),
                write_attrs=(),
            ),
        ),
        ref("softkeyTemplateName"),
        leaf("loginUserId", mode=READ),
        ref("defaultProfileName"),
        leaf("enableExtensionMobility"),
        ref("currentProfileName", mode=READ),
        leaf("loginTime", mode=READ),
        leaf("loginDuration", mode=READ),
        group(
            "currentConfig",
            leaf("userHoldMohAudioSourceId"),
            ref("phoneTemplateName"),
            leaf("mlppDomainId"),
            leaf("mlppIndicationStatus"),
            leaf("preemption"),
            ref("softkeyTemplateName"),
            leaf("ignorePresentationIndicators"),
            leaf("singleButtonBarge"),
            leaf("joinAcrossLines"),
            leaf("callInfoPrivacyStatus"),
            leaf("dndStatus"),
            leaf("dndRingSetting"),
            leaf("dndOption"),
            leaf("alwaysUsePrimeLine"),
            leaf("alwaysUsePrimeLineForVoiceMessage"),
            ref("emccCallingSearchSpaceName"),
            leaf("deviceName"),
            leaf("model"),
            leaf("product"),
            leaf("deviceProtocol"),
            leaf("class"),
            leaf("addressMode"),
            leaf("allowAutoConfig"),
            leaf("remoteSrstOption"),
            leaf("remoteSrstIp"),
            leaf("remoteSrstPort"),
            leaf("remoteSipSrstIp"),
            leaf("remoteSipSrstPort"),
            leaf("geolocationInfo"),
            leaf("remoteLocationName"),
            mode=READ,
        ),
        leaf("singleButtonBarge", "Default", mode=WRITE),
        leaf("joinAcrossLines", "Default", mode=WRITE),
        leaf("builtInBridgeStatus", "Default", mode=WRITE),
        leaf("callInfoPrivacyStatus", "Default", mode=WRITE),
        leaf("hlogStatus"),
        ref("ownerUserName"),
        leaf("ignorePresentationIndicators", "false", mode=WRITE),
        leaf("packetCaptureMode", "None", mode=WRITE),
        leaf("packetCaptureDuration", "0", mode=WRITE),
        ref("subscribeCallingSearchSpaceName", mode=WRITE),
        ref("rerouteCallingSearchSpaceName", mode=WRITE),
        leaf("allowCtiControlFlag", mode=WRITE),
        ref("presenceGroupName", mode=WRITE),
        leaf("unattendedPort", "false", mode=WRITE),
        leaf("requireDtmfReception", "false", mode=WRITE),
        leaf("rfc2833Disabled", "false", mode=WRITE),
        leaf("certificateOperation", "No Pending Operation", mode=WRITE),
        leaf("authenticationMode", "By Null String", mode=WRITE),
        leaf("keySize", "1024", mode=WRITE),
        leaf("keyOrder", "RSA Only", mode=WRITE),
        leaf("ecKeySize", "384", mode=WRITE),
        leaf("authenticationString", mode=WRITE),
        leaf("upgradeFinishTime", mode=WRITE),
        leaf("deviceMobilityMode", "Default", mode=WRITE),
        leaf("remoteDevice", "false", mode=WRITE),
        leaf("dndOption", "Ringer Off", mode=WRITE),
        leaf("dndRingSetting", mode=WRITE),
        leaf("dndStatus", mode=WRITE),
        leaf("isActive", "true", mode=WRITE),
        ref("mobilityUserIdName", mode=WRITE),
        leaf("phoneSuite", "Default", mode=WRITE),
        leaf("phoneServiceDisplay", "Default", mode=WRITE),
        leaf("isProtected", "false", mode=WRITE),
        leaf("mtpRequired", mode=WRITE),
        leaf("mtpPreferedCodec", "711ulaw", mode=WRITE),
        ref("dialRulesName", mode=WRITE),
        leaf("sshUserId", mode=WRITE),
        leaf("sshPwd", mode=WRITE),
        leaf("digestUser", mode=WRITE),
        leaf("outboundCallRollover", "No Rollover", mode=WRITE),
        leaf("hotlineDevice", "false", mode=WRITE),
        leaf("secureInformationUrl", mode=WRITE),
        leaf("secureDirectoryUrl", mode=WRITE),
        leaf("secureMessageUrl", mode=WRITE),
        leaf("secureServicesUrl", mode=WRITE),
        leaf("secureAuthenticationUrl", mode=WRITE),
        leaf("secureIdleUrl", mode=WRITE),
        leaf("alwaysUsePrimeLine", "Default", mode=WRITE),
        leaf("alwaysUsePrimeLineForVoiceMessage", "Default", mode=WRITE),
        ref("featureControlPolicy", mode=WRITE),
        leaf("deviceTrustMode", "Not Trusted", mode=WRITE),
        leaf("earlyOfferSupportForVoiceCall", "false", mode=WRITE),
        leaf("requireThirdPartyRegistration", mode=WRITE),
        leaf("blockIncomingCallsWhenRoaming", mode=WRITE),
        leaf("homeNetworkId", mode=WRITE),
        leaf("AllowPresentationSharingUsingBfcp", "false", mode=WRITE),
        group(
            "confidentialAccess",
            leaf("confidentialAccessMode"),
            leaf("confidentialAccessLevel"),
            mode=WRITE,
        ),
        leaf("requireOffPremiseLocation", "false", mode=WRITE),
        leaf("allowiXApplicableMedia", "false", mode=WRITE),
        ref("cgpnIngressDN", mode=WRITE),
        leaf("useDevicePoolCgpnIngressDN", "true", mode=WRITE),
        leaf("msisdn", mode=WRITE),
        leaf("enableCallRoutingToRdWhenNoneIsActive", "false", mode=WRITE),
        ref("wifiHotspotProfile", mode=WRITE),
        ref("wirelessLanProfileGroup", mode=WRITE),
        ref("elinGroup", mode=WRITE),
    ),
    tag_attrs=("ctiid", "uuid"),
    key_tags=("name", "uuid"),
)


# ---------------------------------------------------------------------------
# Lines (directory numbers)
# ---------------------------------------------------------------------------


def _forward(
    name: str, *, duration=False, secondary_css=False, voicemail_mode=BOTH
) -> Field:
    children = [leaf("forwardToVoiceMail", mode=voicemail_mode), ref("callingSearchSpaceName")]
    if secondary_css:
        children.append(ref("secondaryCallingSearchSpaceName"))
    children.append(leaf("destination"))
    if duration:
        children.append(leaf("duration"))
    return group(name, *children)


def _alt_num(name: str) -> Field:
    return group(
        name,
        leaf("numMask"),
        leaf("isUrgent", "false"),
        leaf("addLocalRoutePartition", "true"),
        ref("routePartition"),
        leaf("advertiseGloballyIls", "true"),
        mode=WRITE,
    )


LINE = EntitySchema(
    "line",
    (
        leaf("pattern", mode=READ),
        leaf("newPattern", mode=WRITE),
        leaf("description"),
        leaf("usage", mode=READ),
        ref("routePartitionName", mode=READ),
        ref("newRoutePartitionName", mode=WRITE),
        ref("aarNeighborhoodName", mode=WRITE),
        leaf("aarDestinationMask", mode=WRITE),
        leaf("aarKeepCallHistory", mode=WRITE),
        leaf("aarVoiceMailEnabled", mode=WRITE),
        _forward("callForwardAll", secondary_css=True),
        _forward("callForwardBusy"),
        _forward("callForwardBusyInt"),
        _forward("callForwardNoAnswer", duration=True),
        _forward("callForwardNoAnswerInt", duration=True),
        _forward("callForwardNoCoverage"),
        _forward("callForwardNoCoverageInt"),
        _forward("callForwardOnFailure"),
        _forward("callForwardAlternateParty", duration=True, voicemail_mode=READ),
        _forward("callForwardNotRegistered"),
        _forward("callForwardNotRegisteredInt"),
        ref("callPickupGroupName"),
        leaf("autoAnswer", "Auto Answer Off"),
        leaf("networkHoldMohAudioSourceId"),
        leaf("userHoldMohAudioSourceId"),
        leaf("alertingName"),
        leaf("asciiAlertingName"),
        ref("presenceGroupName"),
        ref("shareLineAppearanceCssName"),
        ref("voiceMailProfileName"),
        leaf("patternPrecedence", "Default", mode=WRITE),
        leaf("releaseClause", "No Error", mode=WRITE),
        leaf("hrDuration", mode=WRITE),
        leaf("hrInterval", mode=WRITE),
        leaf("cfaCssPolicy", "Use System Default", mode=WRITE),
        ref("defaultActivatedDeviceName"),
        leaf("parkMonForwardNoRetrieveDn", mode=WRITE),
        leaf("parkMonForwardNoRetrieveIntDn", mode=WRITE),
        leaf("parkMonForwardNoRetrieveVmEnabled", mode=WRITE),
        leaf("parkMonForwardNoRetrieveIntVmEnabled", mode=WRITE),
        ref("parkMonForwardNoRetrieveCssName", mode=WRITE),
        ref("parkMonForwardNoRetrieveIntCssName", mode=WRITE),
        leaf("parkMonReversionTimer", mode=WRITE),
        leaf("partyEntranceTone", "Default", mode=WRITE),
        group(
            "directoryURIs",
            group(
                "directoryUri",
                leaf("isPrimary"),
                leaf("uri"),
                ref("partition"),
                leaf("advertiseGloballyViaIls", "true"),
                attrs=("uuid",),
                write_attrs=(),
            ),
        ),
        leaf("allowCtiControlFlag", "true"),
        leaf("rejectAnonymousCall", mode=WRITE),
        leaf("patternUrgency", "false", mode=WRITE),
        group(
            "confidentialAccess",
            leaf("confidentialAccessMode"),
            leaf("confidentialAccessLevel"),
            mode=WRITE,
        ),
        ref("externalCallControlProfile", mode=WRITE),
        _alt_num("enterpriseAltNum"),
        _alt_num("e164AltNum"),
        leaf("pstnFailover", mode=WRITE),
        leaf("callControlAgentProfile", mode=WRITE),
        leaf("useEnterpriseAltNum", mode=WRITE),
        leaf("useE164AltNum", mode=WRITE),
        group("associatedDevices", leaf("device"), mode=READ),
        leaf("active", "true"),
    ),
    key_tags=("pattern", "uuid", "routePartitionName"),
)


# ---------------------------------------------------------------------------
# Read-only entities
# ---------------------------------------------------------------------------

TRANS_PATTERN = EntitySchema(
    "transPattern",
    (
        leaf("pattern", mode=READ),
        leaf("description", mode=READ),
        ref("routePartitionName", mode=READ),
        leaf("calledPartyTransformationMask", mode=READ),
        leaf("callingPartyTransformationMask", mode=READ),
        leaf("useCallingPartyPhoneMask", mode=READ),
        leaf("callingPartyPrefixDigits", mode=READ),
        ref("digitDiscardInstructionName", mode=READ),
        leaf("patternUrgency", mode=READ),
        leaf("prefixDigitsOut", mode=READ),
        leaf("provideOutsideDialtone", mode=READ),
        leaf("callingPartyNumberingPlan", mode=READ),
        leaf("callingPartyNumberType", mode=READ),
        leaf("calledPartyNumberingPlan", mode=READ),
        leaf("calledPartyNumberType", mode=READ),
        ref("callingSearchSpaceName", mode=READ),
    ),
)

ROUTE_PLAN = EntitySchema(
    "routePlan",
    (
        leaf("dnOrPattern", mode=READ),
        ref("partition", mode=READ),
        leaf("type", mode=READ),
        leaf("routeDetail", mode=READ),
    ),
)

LDAP_DIRECTORY = EntitySchema(
    "ldapDirectory",
    (
        leaf("name", mode=READ),
        leaf("ldapDn", mode=READ),
        leaf("userSearchBase", mode=READ),
    ),
)
